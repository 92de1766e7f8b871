"""
Handles the low-level downloading of files over HTTP with retries and a shared
connection pool.
"""

import asyncio
import logging
import os

import aiofiles
import aiohttp
from rich.progress import TaskID

from jardownloader import __version__
from jardownloader.cli.progress_manager import ProgressManager
from jardownloader.models.stats import DownloadStats

log = logging.getLogger(__name__)

_connection_pool: aiohttp.ClientSession | None = None
_pool_lock = asyncio.Lock()

CHUNK_SIZE = 131072  # 128 KB


async def get_connection_pool(max_workers: int = 4) -> aiohttp.ClientSession:
    """
    Gets or creates a shared aiohttp ClientSession for downloads.

    Only one connection pool exists for the lifetime of a run; it is closed
    with close_connection_pool().

    Args:
        max_workers: Maximum concurrent connections (should match config.max_workers).
    """
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            return _connection_pool

        connector = aiohttp.TCPConnector(
            limit=max_workers * 2,
            limit_per_host=max_workers,
            ttl_dns_cache=600,
            keepalive_timeout=30,
            enable_cleanup_closed=True,
        )
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=15, sock_read=90)
        _connection_pool = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers={"User-Agent": f"jardownloader/{__version__}"},
        )
        log.debug(f"Created download pool with limit_per_host={max_workers}")

    return _connection_pool


async def close_connection_pool() -> None:
    """Closes the shared global connection pool."""
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            await _connection_pool.close()
            log.debug("Shared downloader connection pool closed.")
        _connection_pool = None


class Downloader:
    """A low-level file downloader with retry logic and exponential backoff."""

    def __init__(
        self, max_attempts: int = 3, base_delay: float = 1.5, max_workers: int = 4
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_workers = max_workers

    async def download_file(
        self,
        url: str,
        destination_path: str,
        stats: DownloadStats | None = None,
        progress_manager: ProgressManager | None = None,
        task_id: TaskID | None = None,
    ) -> int:
        """
        Streams a URL to destination_path and returns the number of bytes written.

        Client errors and timeouts are retried; the last one is re-raised once
        all attempts are used up.
        """
        last_exception: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._attempt_download(
                    url, destination_path, stats, progress_manager, task_id
                )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_exception = e
                log.debug(
                    f"Download attempt {attempt}/{self.max_attempts} for "
                    f"'{os.path.basename(destination_path)}' failed: {e}"
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.base_delay * (2 ** (attempt - 1)))

        raise last_exception

    async def _attempt_download(
        self,
        url: str,
        destination_path: str,
        stats: DownloadStats | None,
        progress_manager: ProgressManager | None,
        task_id: TaskID | None,
    ) -> int:
        session = await get_connection_pool(self.max_workers)
        async with session.get(url, allow_redirects=True) as response:
            response.raise_for_status()

            if progress_manager and task_id is not None:
                progress_manager.update_task_total(task_id, response.content_length)

            bytes_downloaded = 0
            async with aiofiles.open(destination_path, "wb") as f:
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    await f.write(chunk)
                    bytes_downloaded += len(chunk)
                    if stats:
                        await stats.record_bytes(len(chunk))
                    if progress_manager and task_id is not None:
                        progress_manager.update_task_progress(
                            task_id, completed=bytes_downloaded
                        )
            return bytes_downloaded
