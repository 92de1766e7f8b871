"""
The main orchestrator for reading manifests, scanning jars, and managing the
download queue.
"""

import asyncio
import json
import logging
import os
import time
from collections import OrderedDict
from pathlib import Path

import aiohttp
from rich.markup import escape

from jardownloader.cli.progress_manager import ProgressManager
from jardownloader.core.jar_scanner import find_jar_files, read_jar_manifest
from jardownloader.core.manifest import read_manifest_file
from jardownloader.exceptions import FileIntegrityError, InvalidArchiveError
from jardownloader.models.config import DownloadConfig
from jardownloader.models.dependency import Dependency, ManifestParseResult
from jardownloader.models.stats import DownloadStats
from jardownloader.storage.archive import DownloadArchive
from jardownloader.transfer import ArchiveIntegrityChecker, Downloader
from jardownloader.utils.path import create_dir, temp_path_for

log = logging.getLogger(__name__)


class DownloadManager:
    """Orchestrates the entire download process."""

    def __init__(
        self,
        config: DownloadConfig,
        archive: DownloadArchive | None,
        progress_manager: ProgressManager,
    ):
        self.config = config
        self.archive = archive if config.download_archive else None
        self.progress_manager = progress_manager
        self.download_dir = Path(config.download_dir)
        self.stats = DownloadStats(dry_run=config.dry_run)
        self.start_time = time.monotonic()
        self.downloader = Downloader(
            max_attempts=config.max_attempts,
            base_delay=config.retry_delay,
            max_workers=config.max_workers,
        )
        self.semaphore = asyncio.Semaphore(config.max_workers)
        self._seen_urls: set[str] = set()
        self._planned_destinations: set[Path] = set()
        self._destination_locks: OrderedDict[Path, asyncio.Lock] = OrderedDict()
        self._max_locks = 1000
        self._locks_guard = asyncio.Lock()

    def save_session_stats(self):
        """Appends the current session's stats to a history file."""
        stats_file = Path(self.config.config_path) / "session_history.jsonl"
        try:
            stats_file.parent.mkdir(parents=True, exist_ok=True)
            with open(stats_file, "a", encoding="utf-8") as f:
                session_data = {
                    "timestamp": int(time.time()),
                    "download_dir": str(self.download_dir.resolve()),
                    "files_downloaded": self.stats.files_downloaded,
                    "files_skipped": self.stats.files_skipped,
                    "files_failed": self.stats.files_failed,
                    "lines_ignored": self.stats.lines_ignored,
                    "jars_inspected": self.stats.jars_inspected,
                    "total_size_downloaded": self.stats.total_size_downloaded,
                    "duration_seconds": round(time.monotonic() - self.start_time, 2),
                }
                json.dump(session_data, f)
                f.write("\n")
        except OSError as e:
            log.warning(f"[yellow]Could not save session stats:[/] {e}")

    async def download_from_file(self, manifest_path: Path) -> None:
        """Direct mode: downloads everything listed in one manifest file."""
        self.progress_manager.log_message(
            f"Reading dependencies from file: [dim]{escape(str(manifest_path))}[/dim]"
        )
        result = await asyncio.to_thread(read_manifest_file, manifest_path)
        self._report_ignored(result)
        await self._download_all(result.dependencies)

    async def download_from_jars(self, search_path: Path) -> None:
        """Scan mode: downloads the manifests embedded in every jar below search_path."""
        self.progress_manager.log_message(
            f"Searching for .jar files in: [dim]{escape(str(search_path.resolve()))}[/dim]"
        )
        self.progress_manager.log_message(
            "Downloading dependencies into: "
            f"[dim]{escape(str(self.download_dir.resolve()))}[/dim]"
        )

        jar_paths = await asyncio.to_thread(find_jar_files, search_path)
        if not jar_paths:
            self.progress_manager.log_message(
                "[yellow]No .jar files found.[/yellow]", level="warning"
            )
            return

        dependencies: list[Dependency] = []
        manifest_name = self.config.manifest_name
        for jar_path in jar_paths:
            self.stats.jars_inspected += 1
            self.progress_manager.log_message(
                f"[bold cyan]→ Inspecting JAR:[/] {escape(jar_path.name)}"
            )
            try:
                result = await asyncio.to_thread(
                    read_jar_manifest, jar_path, manifest_name
                )
            except InvalidArchiveError as e:
                self.stats.jars_failed += 1
                self.progress_manager.log_message(f"[red]  ✗ {e}[/red]", level="error")
                continue

            if result is None:
                self.progress_manager.log_message(
                    f"  [dim]No {escape(manifest_name)} found.[/dim]"
                )
                continue

            self.stats.manifests_found.add(result.source)
            self.progress_manager.log_message(
                f"  [green]Found {escape(manifest_name)}[/green] "
                f"({len(result.dependencies)} URLs)"
            )
            self._report_ignored(result)
            dependencies.extend(result.dependencies)

        await self._download_all(dependencies)

    def _report_ignored(self, result: ManifestParseResult) -> None:
        for line_number, text in result.ignored:
            self.stats.lines_ignored += 1
            self.progress_manager.log_message(
                f"  [yellow][IGNORED][/yellow] Invalid line {line_number}: "
                f"{escape(text)}",
                level="warning",
            )

    async def _download_all(self, dependencies: list[Dependency]) -> None:
        unique = []
        for dep in dependencies:
            if dep.url in self._seen_urls:
                self.stats.files_skipped_duplicate += 1
                log.debug(f"Duplicate URL skipped: {dep.url}")
                continue
            self._seen_urls.add(dep.url)
            unique.append(dep)

        if not unique:
            self.progress_manager.log_message(
                "[yellow]No dependencies to download.[/yellow]", level="warning"
            )
            return

        if not self.config.dry_run:
            create_dir(self.download_dir)

        archived: dict[str, bool] = {}
        if self.archive and not self.config.dry_run:
            archived = await self.archive.check_if_downloaded([d.url for d in unique])

        self.progress_manager.initialize_session(total_files=len(unique))
        tasks = [
            self._download_dependency(dep, archived.get(dep.url, False))
            for dep in unique
        ]
        await asyncio.gather(*tasks)

    async def _get_destination_lock(self, destination: Path) -> asyncio.Lock:
        """One lock per destination so same-named files never race each other."""
        async with self._locks_guard:
            if destination in self._destination_locks:
                self._destination_locks.move_to_end(destination)
                return self._destination_locks[destination]

            lock = asyncio.Lock()
            self._destination_locks[destination] = lock
            if len(self._destination_locks) > self._max_locks:
                self._destination_locks.popitem(last=False)
            return lock

    async def _download_dependency(self, dep: Dependency, in_archive: bool) -> None:
        destination = self.download_dir / dep.file_name

        if in_archive:
            self.stats.files_skipped_archive += 1
            self.progress_manager.increment_skipped()
            self.progress_manager.log_message(
                f"  [yellow][SKIPPED][/yellow] In download archive: {escape(dep.file_name)}"
            )
            return

        if self.config.dry_run:
            if destination.exists() or destination in self._planned_destinations:
                self.stats.files_skipped_exists += 1
                self.progress_manager.log_message(
                    f"  [yellow][SKIPPED][/yellow] Already exists: {escape(dep.file_name)}"
                )
                return
            self._planned_destinations.add(destination)
            self.stats.files_downloaded += 1
            self.progress_manager.log_message(
                f"  [cyan]Would download[/] {escape(dep.url)} → "
                f"[dim]{escape(str(destination))}[/dim]"
            )
            return

        lock = await self._get_destination_lock(destination)
        async with lock, self.semaphore:
            if destination.exists():
                self.stats.files_skipped_exists += 1
                self.progress_manager.increment_skipped()
                self.progress_manager.log_message(
                    f"  [yellow][SKIPPED][/yellow] Already exists: {escape(dep.file_name)}"
                )
                return
            await self._transfer(dep, destination)

    async def _transfer(self, dep: Dependency, destination: Path) -> None:
        temp_path = temp_path_for(destination)
        log.info(f"  Downloading: [dim]{escape(dep.url)}[/dim]")
        task_id = self.progress_manager.add_file_task(dep.file_name)
        try:
            size = await self.downloader.download_file(
                url=dep.url,
                destination_path=str(temp_path),
                stats=self.stats,
                progress_manager=self.progress_manager,
                task_id=task_id,
            )

            if self.config.verify_archives and ArchiveIntegrityChecker.applies_to(
                dep.file_name
            ):
                is_valid = await asyncio.to_thread(
                    ArchiveIntegrityChecker.check_zip, str(temp_path)
                )
                if not is_valid:
                    raise FileIntegrityError(
                        "Downloaded file is not a valid archive."
                    )

            await asyncio.to_thread(os.replace, temp_path, destination)
            self.stats.files_downloaded += 1
            self.stats.total_size_downloaded += size
            self.progress_manager.remove_task(task_id, success=True)
            log.info(
                f"  [green]Download complete →[/green] {escape(dep.file_name)}"
            )

            if self.archive:
                await self.archive.add_downloads(
                    [
                        {
                            "url": dep.url,
                            "file_name": dep.file_name,
                            "size_bytes": size,
                            "source": dep.source,
                        }
                    ]
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._record_failure(task_id, dep, f"Network error: {e}")
        except FileIntegrityError as e:
            self._record_failure(task_id, dep, str(e))
        except OSError as e:
            self._record_failure(task_id, dep, f"File error: {e}")
        except Exception as e:
            self._record_failure(task_id, dep, f"Unexpected error: {e}")
        finally:
            if temp_path.exists():
                try:
                    os.remove(temp_path)
                except OSError as e:
                    log.debug(f"Could not remove temp file '{temp_path}': {e}")

    def _record_failure(self, task_id, dep: Dependency, reason: str) -> None:
        self.stats.files_failed += 1
        self.progress_manager.remove_task(task_id, success=False)
        log.error(
            f"  [red]✗ ERROR downloading[/red] {escape(dep.url)}: {escape(reason)}",
            exc_info=log.getEffectiveLevel() == logging.DEBUG,
        )
