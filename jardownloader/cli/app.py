"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from jardownloader import __version__
from jardownloader.core.download_manager import DownloadManager
from jardownloader.exceptions import JarDownloaderError
from jardownloader.storage.archive import DownloadArchive
from jardownloader.storage.config_manager import ConfigManager
from jardownloader.transfer import close_connection_pool

from .formatters import (
    print_banner,
    print_config,
    print_stats_table,
    print_summary_panel,
    print_validation_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("jardownloader")

app = typer.Typer(
    name="jardownloader",
    help=(
        "Downloads the dependencies declared in dependencies.txt manifests, either"
        " from a single file or from the manifests embedded in .jar files."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "jardownloader"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """JAR dependency downloader"""
    if version:
        console.print(f"[bold]jardownloader[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log.setLevel("DEBUG" if verbose >= 2 else "INFO")

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[yellow]No config file found, defaults are in use.[/] Run"
                " [cyan]jardownloader init[/cyan] to create one."
            )
            raise typer.Exit()
        print_config(CONFIG_FILE, ConfigManager(CONFIG_FILE).get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _run_session(cli_options: dict, strict: bool, runner) -> None:
    """
    Loads the configuration, runs one download session and prints its summary.

    runner is an async callable receiving the DownloadManager.
    """
    print_banner(console, __version__)
    cli_options = {k: v for k, v in cli_options.items() if v is not None}

    try:
        config = ConfigManager(CONFIG_FILE).load_config(cli_options)
    except JarDownloaderError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    async def _session_async():
        archive = DownloadArchive(CONFIG_DIR) if config.download_archive else None
        async with ProgressManager(
            console=console, dry_run=config.dry_run
        ) as progress_manager:
            manager = DownloadManager(config, archive, progress_manager)
            start_time = time.monotonic()
            try:
                await runner(manager)
            finally:
                await close_connection_pool()
            return manager, time.monotonic() - start_time, progress_manager

    try:
        manager, duration, progress_manager = asyncio.run(_session_async())
    except JarDownloaderError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    print_summary_panel(manager.stats, duration, progress_manager.get_statistics())
    if not config.dry_run:
        manager.save_session_stats()

    if strict and manager.stats.files_failed:
        raise typer.Exit(code=1)


@app.command()
def fetch(
    manifest: Path | None = typer.Argument(  # noqa: B008
        None, help="Path to a dependencies.txt file.", show_default=False
    ),
    input_file: Path | None = typer.Option(  # noqa: B008
        None, "-i", "--input", help="Same as the MANIFEST argument."
    ),
    download_dir: Path = typer.Option(  # noqa: B008
        Path("."), "-d", "--download-dir", help="Directory to save files into."
    ),
    workers: int | None = typer.Option(
        None, "-w", "--workers", help="Number of simultaneous downloads."
    ),
    attempts: int | None = typer.Option(
        None, "--attempts", help="Download attempts per file before giving up."
    ),
    verify: bool | None = typer.Option(
        None,
        "--verify/--no-verify",
        help="Check that downloaded .jar/.zip files are intact archives.",
    ),
    download_archive: bool | None = typer.Option(
        None,
        "--archive/--no-archive",
        help="Keep a record of downloaded URLs to avoid re-downloading them.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show what would be downloaded without writing files."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with status 1 if any download failed."
    ),
):
    """Download the dependencies listed in one manifest file."""
    if manifest and input_file:
        console.print("[red]✗ Give the manifest either as argument or with -i.[/red]")
        raise typer.Exit(code=1)
    manifest_path = manifest or input_file
    if manifest_path is None:
        console.print(
            "[red]✗ No manifest provided.[/red] "
            "Use: [cyan]jardownloader fetch <dependencies.txt>[/cyan]"
        )
        raise typer.Exit(code=1)

    cli_options = {
        "download_dir": str(download_dir),
        "max_workers": workers,
        "max_attempts": attempts,
        "verify_archives": verify,
        "download_archive": download_archive,
        "dry_run": dry_run,
    }
    _run_session(
        cli_options, strict, lambda manager: manager.download_from_file(manifest_path)
    )


@app.command()
def scan(
    search_path: Path = typer.Argument(  # noqa: B008
        Path("."), help="Directory (or single .jar) to search for jar files."
    ),
    download_dir: Path = typer.Argument(  # noqa: B008
        Path("."), help="Directory to save files into."
    ),
    manifest_name: str | None = typer.Option(
        None,
        "--manifest-name",
        help="Name of the manifest entry to look for inside each jar.",
    ),
    workers: int | None = typer.Option(
        None, "-w", "--workers", help="Number of simultaneous downloads."
    ),
    attempts: int | None = typer.Option(
        None, "--attempts", help="Download attempts per file before giving up."
    ),
    verify: bool | None = typer.Option(
        None,
        "--verify/--no-verify",
        help="Check that downloaded .jar/.zip files are intact archives.",
    ),
    download_archive: bool | None = typer.Option(
        None,
        "--archive/--no-archive",
        help="Keep a record of downloaded URLs to avoid re-downloading them.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show what would be downloaded without writing files."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with status 1 if any download failed."
    ),
):
    """Search jar files for embedded manifests and download their dependencies."""
    cli_options = {
        "download_dir": str(download_dir),
        "manifest_name": manifest_name,
        "max_workers": workers,
        "max_attempts": attempts,
        "verify_archives": verify,
        "download_archive": download_archive,
        "dry_run": dry_run,
    }
    _run_session(
        cli_options, strict, lambda manager: manager.download_from_jars(search_path)
    )


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config without asking."
    ),
):
    """Write a configuration file with the default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except JarDownloaderError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        print_validation_table(config)
    except JarDownloaderError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def stats():
    """Show statistics from the download archive."""

    async def _get_stats():
        archive = DownloadArchive(CONFIG_DIR)
        return await archive.get_stats()

    stats_data = asyncio.run(_get_stats())
    if stats_data:
        print_stats_table(stats_data)
    else:
        console.print("[yellow]Could not retrieve stats.[/yellow]")
        raise typer.Exit(code=1)


@app.command(name="clear-archive")
def clear_archive(
    force: bool = typer.Option(
        False, "--force", "-f", help="Bypass the confirmation prompt."
    ),
):
    """Clear the entire download archive database."""
    if not force and not typer.confirm(
        "Are you sure you want to clear the download archive? "
        "Previously downloaded URLs will be fetched again."
    ):
        console.print("[yellow]Operation cancelled.[/yellow]")
        raise typer.Abort()

    async def _clear_archive_async():
        archive = DownloadArchive(CONFIG_DIR)
        cleared = await archive.clear()
        return cleared and await archive.vacuum()

    if asyncio.run(_clear_archive_async()):
        console.print("[green]✓ Download archive cleared.[/green]")
    else:
        console.print("[red]✗ Failed to clear download archive.[/red]")
        raise typer.Exit(code=1)
