"""
Dataclasses for tracking the results of an archive run.
"""

import asyncio
from dataclasses import dataclass, field

from coub_archiver.exceptions import AssetFetchError


@dataclass
class GroupResult:
    """Outcome of one asset group for one clip."""

    group: str
    attempted: int = 0
    downloaded: int = 0
    errors: list[AssetFetchError] = field(default_factory=list)
    aborted: bool = False

    @property
    def failed(self) -> int:
        return len(self.errors)


@dataclass
class ClipResult:
    """Outcome of all asset groups for one clip, one slot per group."""

    clip_id: str
    title: str
    groups: list[GroupResult] = field(default_factory=list)
    crashed_groups: list[str] = field(default_factory=list)

    @property
    def downloaded(self) -> int:
        return sum(g.downloaded for g in self.groups)

    @property
    def failed(self) -> int:
        return sum(g.failed for g in self.groups)

    @property
    def ok(self) -> bool:
        return not self.crashed_groups and all(
            not g.errors and not g.aborted for g in self.groups
        )


@dataclass
class ArchiveStats:
    """Tracks statistics for an archive session."""

    clips_total: int = 0
    reposts_skipped: int = 0
    clips_prepared: int = 0
    clips_completed: int = 0
    clips_with_failures: int = 0
    assets_downloaded: int = 0
    assets_failed: int = 0
    groups_aborted: int = 0
    total_size_downloaded: int = 0
    peak_concurrent: int = 0

    _in_flight: int = field(default=0, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def clip_started(self) -> None:
        async with self._lock:
            self._in_flight += 1
            self.peak_concurrent = max(self.peak_concurrent, self._in_flight)

    async def record_clip(self, result: ClipResult) -> None:
        """Folds one clip's result into the session totals."""
        async with self._lock:
            self._in_flight -= 1
            self.clips_completed += 1
            self.assets_downloaded += result.downloaded
            self.assets_failed += result.failed
            self.groups_aborted += sum(1 for g in result.groups if g.aborted)
            if not result.ok:
                self.clips_with_failures += 1

    async def add_bytes(self, size: int) -> None:
        async with self._lock:
            self.total_size_downloaded += size
