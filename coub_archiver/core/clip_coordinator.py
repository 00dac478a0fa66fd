"""
Runs the asset groups of one coub concurrently and joins their results.
"""

import asyncio
import logging
from pathlib import Path

from coub_archiver.exceptions import GroupAbortError
from coub_archiver.models.coub import ClipRecord
from coub_archiver.models.stats import ClipResult, GroupResult
from coub_archiver.utils.rate_limiter import IntervalRateLimiter
from coub_archiver.utils.structured_logger import ClipLogger, StructuredLogger

from .asset_groups import (
    AssetGroupDownloader,
    Fetcher,
    FileRenditionGroup,
    FrameRenditionGroup,
    ImageRenditionGroup,
)

log = logging.getLogger(__name__)


class ClipDownloadCoordinator:
    """
    Fans out the file, image and first-frame groups of a clip and waits for all
    three. Group failures are logged and recorded, never raised.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        logger: StructuredLogger,
        file_interval: float = 0.1,
        image_interval: float = 1.0,
        strict_image_groups: bool = False,
    ):
        self.fetcher = fetcher
        self.logger = logger
        self.file_interval = file_interval
        self.image_interval = image_interval
        self.strict_image_groups = strict_image_groups

    def build_groups(self) -> list[AssetGroupDownloader]:
        """Creates fresh group downloaders, each with its own limiter."""
        return [
            FileRenditionGroup(
                self.fetcher,
                IntervalRateLimiter(self.file_interval, name="files"),
                self.logger,
            ),
            ImageRenditionGroup(
                self.fetcher,
                IntervalRateLimiter(self.image_interval, name="images"),
                self.logger,
                abort_on_failure=self.strict_image_groups,
            ),
            FrameRenditionGroup(
                self.fetcher,
                IntervalRateLimiter(self.image_interval, name="first_frames"),
                self.logger,
                abort_on_failure=self.strict_image_groups,
            ),
        ]

    async def download(self, clip: ClipRecord, out_dir: Path) -> ClipResult:
        clip_log = ClipLogger(self.logger, clip.id, clip.title)
        clip_log.clip_started()

        groups = self.build_groups()
        outcomes = await asyncio.gather(
            *(group.download(clip, out_dir) for group in groups),
            return_exceptions=True,
        )

        result = ClipResult(clip_id=str(clip.id), title=clip.title)
        for group, outcome in zip(groups, outcomes):
            if isinstance(outcome, GroupResult):
                result.groups.append(outcome)
            elif isinstance(outcome, GroupAbortError):
                result.groups.append(
                    outcome.result
                    or GroupResult(group.name, errors=[outcome.error], aborted=True)
                )
            elif isinstance(outcome, asyncio.CancelledError):
                raise outcome
            else:
                result.crashed_groups.append(group.name)
                clip_log.group_crashed(group.name, outcome)
                log.debug(f"Group '{group.name}' traceback:", exc_info=outcome)

        clip_log.clip_completed(result)
        return result
