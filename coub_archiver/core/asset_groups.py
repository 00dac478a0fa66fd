"""
Downloaders for the asset groups of a single coub.

Each group fetches its assets strictly in order, one at a time, waiting on its
own rate limiter before every request.
"""

from pathlib import Path
from typing import Protocol

from coub_archiver.exceptions import AssetFetchError, GroupAbortError
from coub_archiver.models.coub import ClipRecord, TemplatedVersions
from coub_archiver.models.stats import GroupResult
from coub_archiver.storage.clip_writer import clip_dir_name
from coub_archiver.utils.path import filename_from_url
from coub_archiver.utils.rate_limiter import IntervalRateLimiter
from coub_archiver.utils.structured_logger import ClipLogger, StructuredLogger


# (label, url, destination)
Asset = tuple[str, str, Path]


class Fetcher(Protocol):
    async def fetch(self, destination_path: str, url: str) -> int: ...


def _destination(out_dir: Path, url: str, label: str) -> Path:
    return out_dir / (filename_from_url(url) or label)


class AssetGroupDownloader:
    """Base class: subclasses list their assets, this class fetches them in order."""

    name = "assets"

    def __init__(
        self,
        fetcher: Fetcher,
        limiter: IntervalRateLimiter,
        logger: StructuredLogger,
        abort_on_failure: bool = False,
    ):
        self.fetcher = fetcher
        self.limiter = limiter
        self.logger = logger
        self.abort_on_failure = abort_on_failure

    def assets(self, clip: ClipRecord, out_dir: Path) -> list[Asset]:
        raise NotImplementedError

    async def download(self, clip: ClipRecord, out_dir: Path) -> GroupResult:
        """
        Fetches every asset of the group for `clip` into `out_dir`.

        A missing URL or a failed fetch is logged and recorded. When
        `abort_on_failure` is set, the first failure stops the group with a
        GroupAbortError carrying the partial result.
        """
        clip_log = ClipLogger(self.logger, clip.id, clip.title)
        result = GroupResult(group=self.name)
        assets = self.assets(clip, out_dir)
        clip_log.group_started(self.name, len(assets))

        for label, url, destination in assets:
            if not url:
                clip_log.asset_missing(self.name, label)
                continue

            await self.limiter.acquire()
            result.attempted += 1
            try:
                await self.fetcher.fetch(str(destination), url)
            except AssetFetchError as e:
                result.errors.append(e)
                clip_log.asset_failed(self.name, label, url, e)
                if self.abort_on_failure:
                    result.aborted = True
                    clip_log.group_completed(result)
                    raise GroupAbortError(self.name, e, result) from e
                continue

            result.downloaded += 1
            clip_log.asset_downloaded(self.name, label, url, str(destination))

        clip_log.group_completed(result)
        return result


class FileRenditionGroup(AssetGroupDownloader):
    """
    Video and audio renditions in priority order, then the share file twice:
    once under its own name and once as '<title>.mp4'.
    """

    name = "files"

    def __init__(
        self,
        fetcher: Fetcher,
        limiter: IntervalRateLimiter,
        logger: StructuredLogger,
    ):
        # Individual renditions are optional, so this group never aborts
        super().__init__(fetcher, limiter, logger, abort_on_failure=False)

    def assets(self, clip: ClipRecord, out_dir: Path) -> list[Asset]:
        html5 = clip.file_versions.html5
        share_url = clip.file_versions.share.default or ""
        renditions = [
            ("video_med", html5.video.med.url),
            ("video_high", html5.video.high.url),
            ("video_higher", html5.video.higher.url),
            ("audio_high", html5.audio.high.url),
            ("audio_med", html5.audio.med.url),
            ("share_default", share_url),
        ]
        assets = [
            (label, url, _destination(out_dir, url, label))
            for label, url in renditions
        ]
        assets.append(
            ("share_renamed", share_url, out_dir / clip_dir_name(clip, suffix=".mp4"))
        )
        return assets


class TemplatedRenditionGroup(AssetGroupDownloader):
    """Expands a URL template once per version, in version order."""

    def versions(self, clip: ClipRecord) -> TemplatedVersions:
        raise NotImplementedError

    def assets(self, clip: ClipRecord, out_dir: Path) -> list[Asset]:
        rendition_set = self.versions(clip)
        return [
            (version, url, _destination(out_dir, url, version))
            for version, url in zip(rendition_set.versions, rendition_set.urls())
        ]


class ImageRenditionGroup(TemplatedRenditionGroup):
    name = "images"

    def versions(self, clip: ClipRecord) -> TemplatedVersions:
        return clip.image_versions


class FrameRenditionGroup(TemplatedRenditionGroup):
    name = "first_frames"

    def versions(self, clip: ClipRecord) -> TemplatedVersions:
        return clip.first_frame_versions
