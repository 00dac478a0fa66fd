"""
The main orchestrator: loads the catalog, prepares each coub's directory and
hands its downloads to a bounded pool of workers.
"""

import asyncio
import json
import logging
import time
from pathlib import Path

from rich.markup import escape

from coub_archiver.models.config import ArchiveConfig
from coub_archiver.models.coub import ClipRecord
from coub_archiver.models.stats import ArchiveStats, ClipResult
from coub_archiver.storage.catalog import filter_reposts, load_catalog
from coub_archiver.storage.clip_writer import create_clip_dir, write_clip_files
from coub_archiver.utils.rate_limiter import IntervalRateLimiter
from coub_archiver.utils.structured_logger import SessionLogger, StructuredLogger

from .asset_groups import Fetcher
from .clip_coordinator import ClipDownloadCoordinator

log = logging.getLogger(__name__)


class CatalogProcessor:
    """Orchestrates an archive run for one user."""

    def __init__(
        self,
        config: ArchiveConfig,
        fetcher: Fetcher,
        logger: StructuredLogger,
        session_logger: SessionLogger | None = None,
        stats: ArchiveStats | None = None,
    ):
        self.config = config
        self.stats = stats or ArchiveStats()
        self.session_logger = session_logger or SessionLogger(logger)
        self.coordinator = ClipDownloadCoordinator(
            fetcher,
            logger,
            file_interval=config.file_interval,
            image_interval=config.image_interval,
            strict_image_groups=config.strict_image_groups,
        )
        self.submit_limiter = IntervalRateLimiter(
            config.submit_interval, name="submissions"
        )
        self.semaphore = asyncio.Semaphore(config.max_workers)
        self.start_time = time.monotonic()
        self._tasks: set[asyncio.Task] = set()

    async def run(self) -> ArchiveStats:
        """
        Archives every non-recoub in the user's catalog.

        Raises:
            CatalogError: If the catalog cannot be loaded or a coub's directory or
            metadata cannot be written. Downloads already in flight are cancelled.
        """
        root_dir = Path(self.config.root_dir)
        records = load_catalog(root_dir, self.config.user)
        clips = filter_reposts(records)

        self.stats.clips_total = len(clips)
        self.stats.reposts_skipped = len(records) - len(clips)
        self.session_logger.session_started(
            self.config.user,
            len(clips),
            self.stats.reposts_skipped,
            self.config.max_workers,
        )
        log.info(f"Total coubs to process: [bold]{len(clips)}[/bold]")

        try:
            for clip in clips:
                out_dir = self.prepare_clip(root_dir, clip)
                await self.submit(clip, out_dir)
        except BaseException as e:
            self.session_logger.session_failed(e)
            await self._cancel_outstanding()
            raise

        await self.drain()
        self.session_logger.session_completed(
            time.monotonic() - self.start_time, self.stats
        )
        log.info("[green]All found coubs downloaded.[/green]")
        return self.stats

    def prepare_clip(self, root_dir: Path, clip: ClipRecord) -> Path:
        """Trims the title, then creates the directory and metadata files."""
        clip.title = clip.title.strip()
        log.info(f"Processing coub: [cyan]{escape(clip.title)}[/cyan]")
        out_dir = create_clip_dir(root_dir, clip)
        write_clip_files(out_dir, clip)
        self.stats.clips_prepared += 1
        self.session_logger.clip_prepared(clip.id, clip.title, out_dir)
        return out_dir

    async def submit(self, clip: ClipRecord, out_dir: Path) -> None:
        """Waits for a free worker slot and a pacing tick, then starts the clip."""
        await self.semaphore.acquire()
        try:
            await self.submit_limiter.acquire()
        except BaseException:
            self.semaphore.release()
            raise
        task = asyncio.create_task(
            self._download_clip(clip, out_dir), name=f"coub-{clip.id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Blocks until every submitted clip has finished."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _download_clip(self, clip: ClipRecord, out_dir: Path) -> None:
        try:
            await self.stats.clip_started()
            result = await self.coordinator.download(clip, out_dir)
        except Exception as e:
            log.error(
                f"[red]  ✗ Unexpected error downloading '{escape(clip.title)}': "
                f"{e}[/red]",
                exc_info=log.getEffectiveLevel() == logging.DEBUG,
            )
            result = ClipResult(
                clip_id=str(clip.id), title=clip.title, crashed_groups=["clip"]
            )
        finally:
            self.semaphore.release()

        await self.stats.record_clip(result)
        if result.ok:
            log.info(f"  [green]✓ Finished:[/] {escape(clip.title)}")
        else:
            log.warning(
                f"  [yellow]⚠ Finished with errors:[/] {escape(clip.title)} "
                f"({result.failed} failed)"
            )

    async def _cancel_outstanding(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def save_session_stats(self) -> None:
        """Appends this run's stats to the history file next to the config."""
        if not self.config.config_path:
            return
        stats_file = Path(self.config.config_path) / "session_history.jsonl"
        try:
            stats_file.parent.mkdir(parents=True, exist_ok=True)
            with open(stats_file, "a", encoding="utf-8") as f:
                session_data = {
                    "timestamp": int(time.time()),
                    "user": self.config.user,
                    "clips_completed": self.stats.clips_completed,
                    "clips_with_failures": self.stats.clips_with_failures,
                    "reposts_skipped": self.stats.reposts_skipped,
                    "assets_downloaded": self.stats.assets_downloaded,
                    "assets_failed": self.stats.assets_failed,
                    "total_size_downloaded": self.stats.total_size_downloaded,
                    "duration_seconds": round(time.monotonic() - self.start_time, 2),
                }
                json.dump(session_data, f)
                f.write("\n")
        except OSError as e:
            log.warning(f"[yellow]Could not save session stats:[/] {e}")
