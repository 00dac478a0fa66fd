from __future__ import annotations

import asyncio
import json

import pytest
from conftest import FakeFetcher, clip_dict, make_clip

from coub_archiver.core.catalog_processor import CatalogProcessor
from coub_archiver.exceptions import CatalogError
from coub_archiver.models.stats import ClipResult


def _write_catalog(tmp_path, records) -> None:
    (tmp_path / "alice.json").write_text(json.dumps(records), encoding="utf-8")


@pytest.mark.asyncio
async def test_run_archives_non_reposts(tmp_path, fast_config, logger) -> None:
    _write_catalog(
        tmp_path,
        [
            clip_dict(1, "  First  "),
            clip_dict(2, "Shared", type="Coub::Recoub"),
            clip_dict(3, "Third"),
        ],
    )
    fetcher = FakeFetcher()

    stats = await CatalogProcessor(fast_config, fetcher, logger).run()

    assert (tmp_path / "First" / "info.txt").read_text().startswith("Title: First\n")
    assert (tmp_path / "Third" / "metadata.json").is_file()
    assert (tmp_path / "First" / "First.mp4").is_file()
    assert not (tmp_path / "Shared").exists()
    assert not any("/2/" in url for url in fetcher.urls)
    assert stats.clips_total == 2
    assert stats.reposts_skipped == 1
    assert stats.clips_completed == 2
    assert stats.assets_downloaded == 2 * (7 + 2 + 2)
    assert stats.assets_failed == 0


@pytest.mark.asyncio
async def test_download_failures_never_stop_the_run(
    tmp_path, fast_config, logger
) -> None:
    _write_catalog(tmp_path, [clip_dict(1, "a"), clip_dict(2, "b")])
    fetcher = FakeFetcher(fail=lambda url: url.startswith("https://cdn.example/1/"))

    stats = await CatalogProcessor(fast_config, fetcher, logger).run()

    assert stats.clips_completed == 2
    assert stats.clips_with_failures == 1
    assert stats.assets_failed == 7
    assert (tmp_path / "b" / "b.mp4").is_file()


@pytest.mark.asyncio
async def test_worker_pool_bounds_in_flight_clips(
    tmp_path, fast_config, logger
) -> None:
    _write_catalog(tmp_path, [clip_dict(i, f"clip {i}") for i in range(1, 8)])
    processor = CatalogProcessor(fast_config, FakeFetcher(), logger)

    in_flight = 0
    peak = 0
    order: list[str] = []

    async def fake_download(clip, out_dir):
        nonlocal in_flight, peak
        assert (out_dir / "info.txt").is_file()
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        order.append(str(clip.id))
        return ClipResult(clip_id=str(clip.id), title=clip.title)

    processor.coordinator.download = fake_download

    stats = await processor.run()

    assert peak == fast_config.max_workers
    assert stats.peak_concurrent <= fast_config.max_workers
    assert sorted(order) == [str(i) for i in range(1, 8)]
    assert stats.clips_completed == 7


@pytest.mark.asyncio
async def test_unparseable_catalog_creates_nothing(
    tmp_path, fast_config, logger
) -> None:
    (tmp_path / "alice.json").write_text('[{"id": 1, "title": "x"', encoding="utf-8")
    fetcher = FakeFetcher()

    with pytest.raises(CatalogError):
        await CatalogProcessor(fast_config, fetcher, logger).run()

    assert [p.name for p in tmp_path.iterdir()] == ["alice.json"]
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_preparation_failure_aborts_before_later_clips(
    tmp_path, fast_config, logger
) -> None:
    _write_catalog(
        tmp_path, [clip_dict(1, "ok"), clip_dict(2, "blocked"), clip_dict(3, "later")]
    )
    (tmp_path / "blocked").write_text("not a directory", encoding="utf-8")

    with pytest.raises(CatalogError):
        await CatalogProcessor(fast_config, FakeFetcher(delay=0.05), logger).run()

    assert (tmp_path / "ok" / "info.txt").is_file()
    assert not (tmp_path / "later").exists()


@pytest.mark.asyncio
async def test_submissions_are_paced(tmp_path, fast_config, logger) -> None:
    _write_catalog(tmp_path, [clip_dict(i, f"c{i}") for i in range(1, 4)])
    fast_config.submit_interval = 0.05
    processor = CatalogProcessor(fast_config, FakeFetcher(), logger)
    loop = asyncio.get_running_loop()
    started: list[float] = []

    async def fake_download(clip, out_dir):
        started.append(loop.time())
        return ClipResult(clip_id=str(clip.id), title=clip.title)

    processor.coordinator.download = fake_download

    await processor.run()

    gaps = [b - a for a, b in zip(started, started[1:])]
    assert len(gaps) == 2
    assert all(gap >= 0.04 for gap in gaps)


@pytest.mark.asyncio
async def test_null_renditions_only_skip_those_assets(
    tmp_path, fast_config, logger
) -> None:
    record = clip_dict(1, "nulls", first_frame_versions=None)
    record["file_versions"]["html5"]["video"]["higher"] = None
    _write_catalog(tmp_path, [record, clip_dict(2, "complete")])
    fetcher = FakeFetcher()

    stats = await CatalogProcessor(fast_config, fetcher, logger).run()

    assert stats.clips_completed == 2
    assert stats.assets_failed == 0
    assert stats.assets_downloaded == (6 + 2) + (7 + 2 + 2)
    assert not any("/1/video_higher" in url for url in fetcher.urls)
    assert (tmp_path / "nulls" / "nulls.mp4").is_file()


@pytest.mark.asyncio
async def test_cancelled_clip_releases_its_worker_slot(
    tmp_path, fast_config, logger
) -> None:
    fast_config.max_workers = 1
    processor = CatalogProcessor(fast_config, FakeFetcher(), logger)
    entered = asyncio.Event()
    never = asyncio.Event()

    async def stuck_clip_started() -> None:
        entered.set()
        await never.wait()

    processor.stats.clip_started = stuck_clip_started

    await processor.submit(make_clip(clip_id=1), tmp_path)
    await entered.wait()
    assert processor.semaphore.locked()

    await processor._cancel_outstanding()

    assert not processor.semaphore.locked()
    assert processor.stats.clips_completed == 0
