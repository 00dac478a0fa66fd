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

from coub_archiver import __version__
from coub_archiver.core.catalog_processor import CatalogProcessor
from coub_archiver.exceptions import CoubArchiverError
from coub_archiver.media.downloader import AssetFetcher
from coub_archiver.models.stats import ArchiveStats
from coub_archiver.storage.config_manager import ConfigManager
from coub_archiver.utils.structured_logger import create_structured_logger

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_summary_panel,
    print_validation_table,
)

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
log = logging.getLogger("coub_archiver")

app = typer.Typer(
    name="coub-archiver",
    help="Archive a Coub user's clips, metadata and media from a saved listing.",
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "coub-archiver"


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
    """Coub Archiver CLI"""
    if version:
        console.print(f"[bold]coub-archiver[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("coub_archiver").setLevel(log_level)

    if show_config:
        print_config(CONFIG_FILE, ConfigManager(CONFIG_FILE).get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config without asking."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    ConfigManager(CONFIG_FILE).save_new_config()
    console.print(
        f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]"
    )


@app.command(name="archive")
def archive_command(
    root_dir: Path = typer.Argument(  # noqa: B008
        ...,
        help="Directory holding '<user>.json'; coub folders are created here.",
        file_okay=False,
    ),
    user: str = typer.Argument(..., help="User whose listing should be archived."),
    workers: int | None = typer.Option(
        None,
        "-w",
        "--workers",
        help="Number of coubs downloaded at the same time (default 5).",
    ),
    strict_images: bool | None = typer.Option(
        None,
        "--strict-images/--lenient-images",
        help="Stop an image or frame set at its first failed download.",
    ),
    json_logs: bool | None = typer.Option(
        None,
        "--json-logs/--no-json-logs",
        help="Also write structured JSONL logs to the config directory.",
    ),
):
    """Archive every non-recoub coub listed for USER."""
    cli_options = {
        key: value
        for key, value in {
            "root_dir": str(root_dir),
            "user": user,
            "max_workers": workers,
            "strict_image_groups": strict_images,
            "json_logs": json_logs,
        }.items()
        if value is not None
    }

    async def _archive_async():
        try:
            config = ConfigManager(CONFIG_FILE).load_config(cli_options)
        except CoubArchiverError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e

        base_logger, session_logger = create_structured_logger(
            log_dir=CONFIG_DIR / "logs", enable_json=config.json_logs
        )
        base_logger.set_session_context(user=config.user)
        stats = ArchiveStats()
        start_time = time.monotonic()

        with base_logger:
            try:
                async with AssetFetcher(
                    stats=stats,
                    max_attempts=config.max_attempts,
                    base_delay=config.retry_base_delay,
                    max_workers=config.max_workers,
                    connect_timeout=config.connect_timeout,
                    read_timeout=config.read_timeout,
                ) as fetcher:
                    processor = CatalogProcessor(
                        config, fetcher, base_logger, session_logger, stats
                    )
                    console.print(
                        "[bold cyan]📼 Starting archive session...[/bold cyan]"
                    )
                    await processor.run()
            except CoubArchiverError as e:
                console.print(format_error_with_suggestions(e))
                raise typer.Exit(code=1) from e

        print_summary_panel(stats, time.monotonic() - start_time)
        processor.save_session_stats()

    asyncio.run(_archive_async())


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        print_validation_table(config)
    except CoubArchiverError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e
