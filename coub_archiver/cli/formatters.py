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

from coub_archiver.models.config import ArchiveConfig
from coub_archiver.models.stats import ArchiveStats
from coub_archiver.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "CatalogError": [
            "• Check that '<root>/<user>.json' exists and is the JSON list fetched"
            " for that user.",
            "• Make sure the root directory is writable.",
            "• Coub titles that collide with existing files can block directory"
            " creation.",
        ],
        "ConfigurationError": [
            "• Check the values in your config file (`coub-archiver validate`).",
            "• Run `coub-archiver init --force` to regenerate defaults.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration file contents."""
    console = Console()
    if not config_data:
        content = "[dim]No config file; built-in defaults are in use.[/dim]"
    else:
        content = "\n".join(f"{key} = {value}" for key, value in config_data.items())

    console.print(
        Panel(
            content,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: ArchiveConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Max Workers:", str(config.max_workers))
    table.add_row("Submit Interval:", f"{config.submit_interval}s")
    table.add_row("File Interval:", f"{config.file_interval}s")
    table.add_row("Image Interval:", f"{config.image_interval}s")
    table.add_row(
        "Image Groups:",
        "Abort on first failure"
        if config.strict_image_groups
        else "Continue on failure",
    )
    table.add_row("Attempts per File:", str(config.max_attempts))
    table.add_row("JSON Logs:", "✓ Enabled" if config.json_logs else "✗ Disabled")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(stats: ArchiveStats, duration_s: float):
    """Displays the final summary of the archive session."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Coubs Archived:", f"[bold green]{stats.clips_completed}[/bold green]"
    )
    if stats.reposts_skipped > 0:
        stats_table.add_row(
            "○ Recoubs Skipped:", f"[yellow]{stats.reposts_skipped}[/yellow]"
        )
    if stats.clips_with_failures > 0:
        stats_table.add_row(
            "⚠ With Errors:", f"[yellow]{stats.clips_with_failures}[/yellow]"
        )

    stats_table.add_row("", "")  # Spacer

    stats_table.add_row(
        "Files Downloaded:", f"[green]{stats.assets_downloaded}[/green]"
    )
    if stats.assets_failed > 0:
        stats_table.add_row(
            "✗ Files Failed:", f"[bold red]{stats.assets_failed}[/bold red]"
        )
    if stats.groups_aborted > 0:
        stats_table.add_row("Groups Aborted:", f"[red]{stats.groups_aborted}[/red]")

    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(stats.total_size_downloaded)}[/cyan]"
    )
    avg_speed = stats.total_size_downloaded / duration_s if duration_s > 0 else 0
    stats_table.add_row(
        "Avg. Speed:", f"[magenta]{format_size(int(avg_speed))}/s[/magenta]"
    )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")
    stats_table.add_row(
        "Peak Concurrent:", f"[green]{stats.peak_concurrent}[/green]"
    )

    console.print()
    console.print(
        Panel(
            stats_table,
            title="📼 [bold]Archive Complete![/bold]",
            border_style="green" if stats.assets_failed == 0 else "yellow",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
