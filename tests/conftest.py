from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable

import pytest

from coub_archiver.exceptions import AssetFetchError
from coub_archiver.models.config import ArchiveConfig
from coub_archiver.models.coub import ClipRecord
from coub_archiver.utils.structured_logger import StructuredLogger


def clip_dict(
    clip_id: int = 1,
    title: str = "Cat",
    type: str = "Coub::Simple",
    **overrides: Any,
) -> dict[str, Any]:
    base = f"https://cdn.example/{clip_id}"
    data = {
        "id": clip_id,
        "permalink": f"p{clip_id}",
        "title": title,
        "created_at": "2020-01-02T03:04:05Z",
        "type": type,
        "duration": 12.345,
        "views_count": 10,
        "recoubs_count": 2,
        "external_download": False,
        "tags": [{"title": "funny"}, {"title": "cat"}],
        "file_versions": {
            "html5": {
                "video": {
                    "higher": {"url": f"{base}/video_higher.mp4", "size": 3},
                    "high": {"url": f"{base}/video_high.mp4", "size": 2},
                    "med": {"url": f"{base}/video_med.mp4", "size": 1},
                },
                "audio": {
                    "high": {"url": f"{base}/audio_high.mp3", "size": 2},
                    "med": {"url": f"{base}/audio_med.mp3", "size": 1},
                },
            },
            "mobile": {"video": f"{base}/mobile.mp4", "audio": [f"{base}/m.mp3"]},
            "share": {"default": f"{base}/share.mp4"},
        },
        "image_versions": {
            "template": f"https://img.example/{clip_id}/%{{version}}/image.jpg",
            "versions": ["micro", "small"],
        },
        "first_frame_versions": {
            "template": f"https://img.example/{clip_id}/%{{version}}/frame.jpg",
            "versions": ["med", "big"],
        },
    }
    data.update(overrides)
    return data


def make_clip(**kwargs: Any) -> ClipRecord:
    return ClipRecord.model_validate(clip_dict(**kwargs))


class FakeFetcher:
    """Records fetches in order and writes the URL into the destination file."""

    def __init__(
        self,
        fail: Callable[[str], bool] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail = fail or (lambda url: False)
        self.delay = delay

    @property
    def urls(self) -> list[str]:
        return [url for _, url in self.calls]

    async def fetch(self, destination_path: str, url: str) -> int:
        self.calls.append((destination_path, url))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail(url):
            raise AssetFetchError(url, destination_path, "boom")
        Path(destination_path).write_text(url, encoding="utf-8")
        return len(url)


@pytest.fixture()
def logger() -> StructuredLogger:
    return StructuredLogger("coub_archiver.tests", enable_json=False)


@pytest.fixture()
def fast_config(tmp_path) -> ArchiveConfig:
    return ArchiveConfig(
        root_dir=str(tmp_path),
        user="alice",
        max_workers=2,
        submit_interval=0,
        file_interval=0,
        image_interval=0,
    )
