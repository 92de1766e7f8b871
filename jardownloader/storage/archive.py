"""
Manages the SQLite database that records downloaded URLs to prevent redownloading.
"""

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


class DownloadArchive:
    """
    An SQLite history of downloaded dependencies with bounded concurrent access
    and batched operations.
    """

    DB_FILENAME = "download_archive.sqlite"

    def __init__(self, config_dir_path: Path, pool_size: int = 5):
        config_dir_path.mkdir(parents=True, exist_ok=True)
        self.db_path = config_dir_path / self.DB_FILENAME
        self._connection_semaphore = asyncio.Semaphore(pool_size)
        self._initialize_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Gets a new database connection with WAL journaling enabled."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=30, check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            return conn
        except sqlite3.Error as e:
            log.error(f"Failed to connect to archive database: {e}")
            raise

    def _initialize_db(self) -> None:
        """Creates the downloads table and its index if they don't exist."""
        try:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS downloads (
                        url TEXT PRIMARY KEY NOT NULL,
                        file_name TEXT NOT NULL,
                        size_bytes INTEGER DEFAULT 0,
                        source TEXT,
                        downloaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )
                conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_source ON downloads(source);"
                )
                conn.commit()
        except sqlite3.Error as e:
            log.error(f"Failed to initialize archive database at '{self.db_path}': {e}")

    async def _run_in_executor(self, func, *args):
        """Runs a synchronous database function within the connection semaphore."""
        async with self._connection_semaphore:
            return await asyncio.to_thread(func, *args)

    def _check_batch_sync(self, urls: list[str]) -> dict[str, bool]:
        if not urls:
            return {}

        BATCH_SIZE = 999  # SQLite's default host-parameter limit before 3.32.0
        results = {}
        try:
            with self._get_connection() as conn:
                for i in range(0, len(urls), BATCH_SIZE):
                    chunk = urls[i : i + BATCH_SIZE]
                    placeholders = ",".join("?" * len(chunk))
                    query = f"SELECT url FROM downloads WHERE url IN ({placeholders})"  # noqa: S608
                    existing = {row[0] for row in conn.execute(query, chunk)}
                    results.update({url: url in existing for url in chunk})
            return results
        except sqlite3.Error as e:
            log.error(f"Batch archive check failed: {e}")
            return dict.fromkeys(urls, False)

    async def check_if_downloaded(self, urls: list[str]) -> dict[str, bool]:
        """Maps each URL to whether the archive already lists it."""
        return await self._run_in_executor(self._check_batch_sync, urls)

    def _add_batch_sync(self, records: list[dict[str, Any]]) -> bool:
        rows = [
            (r["url"], r["file_name"], int(r.get("size_bytes", 0)), r.get("source"))
            for r in records
            if r.get("url")
        ]
        if not rows:
            return True
        try:
            with self._get_connection() as conn:
                conn.executemany(
                    "INSERT OR REPLACE INTO downloads "
                    "(url, file_name, size_bytes, source) VALUES (?, ?, ?, ?)",
                    rows,
                )
                conn.commit()
            return True
        except sqlite3.Error as e:
            log.error(f"Batch insert into archive failed for {len(rows)} URLs: {e}")
            return False

    async def add_downloads(self, records: list[dict[str, Any]]) -> bool:
        """
        Records downloads. Each record needs 'url' and 'file_name' and may carry
        'size_bytes' and 'source'.
        """
        return await self._run_in_executor(self._add_batch_sync, records)

    def _get_stats_sync(self) -> dict[str, Any] | None:
        try:
            with self._get_connection() as conn:
                total_files, total_bytes = conn.execute(
                    "SELECT COUNT(*), COALESCE(SUM(size_bytes), 0) FROM downloads"
                ).fetchone()
                top_sources = conn.execute(
                    """
                    SELECT source, COUNT(*) as count
                    FROM downloads
                    WHERE source IS NOT NULL AND source != ''
                    GROUP BY source
                    ORDER BY count DESC, source
                    LIMIT 10
                    """
                ).fetchall()
                return {
                    "total_files": total_files,
                    "total_bytes": total_bytes,
                    "top_sources": top_sources,
                }
        except sqlite3.Error as e:
            log.error(f"Failed to get archive stats: {e}")
            return None

    async def get_stats(self) -> dict[str, Any] | None:
        """Retrieves totals and the most prolific manifests from the archive."""
        return await self._run_in_executor(self._get_stats_sync)

    def _vacuum_sync(self) -> bool:
        try:
            with self._get_connection() as conn:
                conn.execute("VACUUM;")
                conn.commit()
            return True
        except sqlite3.Error as e:
            log.error(f"Database vacuum failed: {e}")
            return False

    async def vacuum(self) -> bool:
        """Optimizes the database file by rebuilding it."""
        return await self._run_in_executor(self._vacuum_sync)

    def _clear_sync(self) -> bool:
        try:
            with self._get_connection() as conn:
                conn.execute("DELETE FROM downloads;")
                conn.commit()
            return True
        except sqlite3.Error as e:
            log.error(f"Failed to clear archive: {e}")
            return False

    async def clear(self) -> bool:
        """Removes every record from the archive."""
        return await self._run_in_executor(self._clear_sync)
