from __future__ import annotations

import pytest
from aiohttp import test_utils, web
from conftest import make_clip

from coub_archiver.core.asset_groups import FileRenditionGroup
from coub_archiver.exceptions import AssetFetchError
from coub_archiver.media.downloader import AssetFetcher
from coub_archiver.models.stats import ArchiveStats
from coub_archiver.utils.rate_limiter import IntervalRateLimiter


def _app() -> web.Application:
    async def video(request: web.Request) -> web.Response:
        return web.Response(body=b"video-bytes")

    async def missing(request: web.Request) -> web.Response:
        raise web.HTTPNotFound()

    app = web.Application()
    app.router.add_get("/path/seg.mp4", video)
    app.router.add_get("/missing.mp4", missing)
    app.router.add_get("/9/share.mp4", video)
    return app


@pytest.mark.asyncio
async def test_fetch_writes_and_overwrites(tmp_path) -> None:
    destination = tmp_path / "seg.mp4"
    destination.write_bytes(b"old content that is longer")
    stats = ArchiveStats()

    async with test_utils.TestServer(_app()) as server:
        async with AssetFetcher(max_attempts=1, stats=stats) as fetcher:
            size = await fetcher.fetch(
                str(destination), str(server.make_url("/path/seg.mp4"))
            )

    assert destination.read_bytes() == b"video-bytes"
    assert size == len(b"video-bytes")
    assert stats.total_size_downloaded == size
    assert list(tmp_path.iterdir()) == [destination]


@pytest.mark.asyncio
async def test_http_error_raises_fetch_error(tmp_path) -> None:
    destination = tmp_path / "missing.mp4"

    async with test_utils.TestServer(_app()) as server:
        url = str(server.make_url("/missing.mp4"))
        async with AssetFetcher(max_attempts=3, base_delay=0) as fetcher:
            with pytest.raises(AssetFetchError) as excinfo:
                await fetcher.fetch(str(destination), url)

    assert excinfo.value.url == url
    assert excinfo.value.path == str(destination)
    assert "404" in str(excinfo.value.cause)
    assert not destination.exists()


@pytest.mark.asyncio
async def test_connection_error_raises_fetch_error_after_retries(tmp_path) -> None:
    async with AssetFetcher(max_attempts=2, base_delay=0) as fetcher:
        with pytest.raises(AssetFetchError):
            await fetcher.fetch(str(tmp_path / "x.mp4"), "http://127.0.0.1:1/x.mp4")


@pytest.mark.asyncio
async def test_empty_url_is_rejected_without_network(tmp_path) -> None:
    fetcher = AssetFetcher()
    with pytest.raises(AssetFetchError, match="empty URL"):
        await fetcher.fetch(str(tmp_path / "x.mp4"), "")
    await fetcher.close()


@pytest.mark.asyncio
async def test_long_title_share_copy_fits_name_limit(tmp_path, logger) -> None:
    title = "Ж" * 124

    async with test_utils.TestServer(_app()) as server:
        clip = make_clip(
            clip_id=9,
            title=title,
            file_versions={
                "html5": {},
                "share": {"default": str(server.make_url("/9/share.mp4"))},
            },
        )
        async with AssetFetcher(max_attempts=1) as fetcher:
            group = FileRenditionGroup(fetcher, IntervalRateLimiter(0), logger)
            result = await group.download(clip, tmp_path)

    assert result.failed == 0
    assert result.downloaded == 2
    assert sorted(p.name for p in tmp_path.iterdir()) == sorted(
        ["share.mp4", f"{title}.mp4"]
    )
    assert (tmp_path / f"{title}.mp4").read_bytes() == b"video-bytes"
