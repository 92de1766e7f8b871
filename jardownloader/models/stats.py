"""
Dataclass for tracking download session statistics.
"""

import asyncio
import time
from dataclasses import dataclass, field


@dataclass
class DownloadStats:
    """Tracks statistics for a download session, including real-time speed."""

    files_downloaded: int = 0
    files_skipped_exists: int = 0
    files_skipped_archive: int = 0
    files_skipped_duplicate: int = 0
    files_failed: int = 0
    lines_ignored: int = 0
    total_size_downloaded: int = 0
    dry_run: bool = False

    # Scan mode counters
    jars_inspected: int = 0
    jars_failed: int = 0
    manifests_found: set[str] = field(default_factory=set)

    current_speed_bps: float = 0.0
    peak_speed_bps: float = 0.0
    _bytes_streamed: int = field(default=0, repr=False)
    _speed_samples: list[float] = field(default_factory=list, repr=False)
    _last_progress_time: float = field(default=0.0, repr=False)
    _last_progress_bytes: int = field(default=0, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def __post_init__(self):
        self._last_progress_time = time.monotonic()

    @property
    def files_skipped(self) -> int:
        return (
            self.files_skipped_exists
            + self.files_skipped_archive
            + self.files_skipped_duplicate
        )

    async def record_bytes(self, count: int) -> None:
        """
        Counts freshly streamed bytes for the speed estimate, refreshed roughly
        twice per second. The session total only grows once a file is accepted.
        """
        async with self._lock:
            self._bytes_streamed += count
            now = time.monotonic()
            elapsed = now - self._last_progress_time
            if elapsed <= 0.5:
                return

            bytes_diff = self._bytes_streamed - self._last_progress_bytes
            if bytes_diff > 0:
                self._speed_samples.append(bytes_diff / elapsed)
                # Sliding window of the last 10 samples
                if len(self._speed_samples) > 10:
                    self._speed_samples.pop(0)
                self.current_speed_bps = sum(self._speed_samples) / len(
                    self._speed_samples
                )
                self.peak_speed_bps = max(self.peak_speed_bps, self.current_speed_bps)

            self._last_progress_time = now
            self._last_progress_bytes = self._bytes_streamed
