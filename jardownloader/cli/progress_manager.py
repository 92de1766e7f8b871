"""
Manages a Rich progress display for concurrent downloads: one overall bar plus a
bar per active transfer.
"""

import logging

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

log = logging.getLogger("jardownloader")


class ProgressManager:
    """
    Tracks overall and per-file progress. In dry-run mode nothing is rendered
    and messages go straight to the console.
    """

    def __init__(self, console: Console, dry_run: bool = False):
        self.console = console
        self.dry_run = dry_run

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=True,
        )
        self._overall_task_id: TaskID | None = None
        self._active_tasks: set[TaskID] = set()
        self._stats = {
            "total_files": 0,
            "completed": 0,
            "failed": 0,
            "skipped": 0,
            "peak_concurrent": 0,
        }

    def log_message(self, message: str, level: str = "info"):
        """Unified logging respecting dry_run mode."""
        if self.dry_run:
            style = {"warning": "yellow", "error": "red"}.get(level)
            self.console.print(f"[{style}]{message}[/{style}]" if style else message)
        else:
            getattr(log, level, log.info)(message)

    def initialize_session(self, total_files: int):
        self._stats["total_files"] = total_files
        if not self.dry_run:
            self._overall_task_id = self.progress.add_task(
                "[bold blue]Overall", total=total_files
            )

    def add_file_task(self, description: str, total_size: int | None = None) -> TaskID:
        if self.dry_run:
            return None
        if len(description) > 40:
            description = "…" + description[-39:]
        task_id = self.progress.add_task(description, total=total_size)
        self._active_tasks.add(task_id)
        self._stats["peak_concurrent"] = max(
            self._stats["peak_concurrent"], len(self._active_tasks)
        )
        return task_id

    def update_task_progress(self, task_id: TaskID, completed: int):
        if task_id is not None and not self.dry_run:
            self.progress.update(task_id, completed=completed)

    def update_task_total(self, task_id: TaskID, total: int | None):
        if task_id is not None and not self.dry_run:
            self.progress.update(task_id, total=total)

    def remove_task(self, task_id: TaskID, success: bool = True):
        if task_id is None or self.dry_run:
            return
        if task_id in self._active_tasks:
            self._active_tasks.discard(task_id)
            self.progress.remove_task(task_id)
        self._stats["completed" if success else "failed"] += 1
        self._advance_overall()

    def increment_skipped(self, count: int = 1):
        self._stats["skipped"] += count
        self._advance_overall()

    def _advance_overall(self):
        if self._overall_task_id is None or self.dry_run:
            return
        done = self._stats["completed"] + self._stats["failed"] + self._stats["skipped"]
        self.progress.update(self._overall_task_id, completed=done)

    def get_statistics(self) -> dict:
        return self._stats.copy()

    async def __aenter__(self):
        if not self.dry_run:
            self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self.dry_run:
            self.progress.stop()
