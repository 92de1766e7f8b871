"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from jardownloader.models.config import DownloadConfig
from jardownloader.models.stats import DownloadStats
from jardownloader.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "SourceNotFoundError": [
            "• Check the path for typos.",
            "• Relative paths are resolved against the current directory.",
        ],
        "ManifestReadError": [
            "• Make sure the manifest is a UTF-8 text file.",
            "• Check the file permissions.",
        ],
        "ConfigurationError": [
            "• Run `jardownloader validate` to see which setting is wrong.",
            "• Run `jardownloader init --force` to restore the defaults.",
        ],
        "ClientResponseError": [
            "• The server rejected the request.",
            "• Check that the URL in the manifest is still valid.",
        ],
        "ClientConnectorError": [
            "• A network connection issue occurred.",
            "• Check your internet connection or proxy settings.",
        ],
        "TimeoutError": [
            "• A download timed out, which may indicate network throttling.",
            "• Try reducing the number of `--workers`.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_banner(console: Console, version: str):
    console.print(f"[bold]JAR-DOWNLOADER v{version}[/bold]")
    console.print("[dim]" + "=" * 32 + "[/dim]")
    console.print()


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration file contents."""
    console = Console()
    content = "\n".join(f"{key} = {value}" for key, value in config_data.items())
    console.print(
        Panel(
            content,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: DownloadConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Manifest Name:", config.manifest_name)
    table.add_row("Max Workers:", str(config.max_workers))
    table.add_row(
        "Retries:", f"{config.max_attempts} attempts, {config.retry_delay}s base delay"
    )
    table.add_row(
        "Verify Archives:", "✓ Enabled" if config.verify_archives else "✗ Disabled"
    )
    table.add_row(
        "Download Archive:", "✓ Enabled" if config.download_archive else "✗ Disabled"
    )

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_stats_table(stats_data: dict[str, Any]):
    """Displays download archive statistics."""
    console = Console()
    console.print(
        "\n[bold]Files in Archive:[/] "
        f"[green]{stats_data['total_files']}[/green] "
        f"([cyan]{format_size(stats_data['total_bytes'])}[/cyan])\n"
    )

    if top_sources := stats_data.get("top_sources"):
        table = Table(title="Top Manifests")
        table.add_column("Rank", style="dim")
        table.add_column("Manifest", style="cyan")
        table.add_column("Files", justify="right", style="green")
        for i, (source, count) in enumerate(top_sources, 1):
            table.add_row(str(i), source, str(count))
        console.print(table)
    else:
        console.print("[dim]No downloads recorded yet.[/dim]")


def print_summary_panel(
    stats: DownloadStats, duration_s: float, progress_stats: dict | None = None
):
    """Displays the final summary of the download session."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=18)
    stats_table.add_column(style="white", justify="left")

    label = "→ Planned:" if stats.dry_run else "✓ Downloaded:"
    stats_table.add_row(label, f"[bold green]{stats.files_downloaded}[/bold green]")

    skip_sections = []
    if stats.files_skipped_exists:
        skip_sections.append(f"[yellow]{stats.files_skipped_exists} (exists)[/yellow]")
    if stats.files_skipped_archive:
        skip_sections.append(
            f"[yellow]{stats.files_skipped_archive} (archive)[/yellow]"
        )
    if stats.files_skipped_duplicate:
        skip_sections.append(
            f"[yellow]{stats.files_skipped_duplicate} (duplicate)[/yellow]"
        )
    if skip_sections:
        stats_table.add_row("○ Skipped:", " + ".join(skip_sections))

    if stats.lines_ignored:
        stats_table.add_row("⚠ Ignored Lines:", f"[yellow]{stats.lines_ignored}[/yellow]")

    if stats.files_failed:
        stats_table.add_row("✗ Failed:", f"[bold red]{stats.files_failed}[/bold red]")

    if stats.jars_inspected:
        stats_table.add_row("", "")
        stats_table.add_row(
            "JARs Inspected:",
            f"{stats.jars_inspected} "
            f"([cyan]{len(stats.manifests_found)} with manifest[/cyan])",
        )
        if stats.jars_failed:
            stats_table.add_row("JARs Unreadable:", f"[red]{stats.jars_failed}[/red]")

    stats_table.add_row("", "")
    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(stats.total_size_downloaded)}[/cyan]"
    )
    if stats.peak_speed_bps > 0:
        stats_table.add_row(
            "Peak Speed:",
            f"[magenta]{format_size(int(stats.peak_speed_bps))}/s[/magenta]",
        )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    if progress_stats and progress_stats.get("peak_concurrent"):
        stats_table.add_row(
            "Peak Concurrent:",
            f"[green]{progress_stats['peak_concurrent']}[/green]",
        )

    if stats.dry_run:
        title, border_color = "🔍 [bold]Dry Run Summary[/bold]", "yellow"
    elif stats.files_failed:
        title, border_color = "[bold]Finished with Errors[/bold]", "red"
    else:
        title, border_color = "📦 [bold]Download Complete![/bold]", "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
