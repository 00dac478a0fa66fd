from __future__ import annotations

import json

import pytest
from conftest import make_clip

from coub_archiver.exceptions import CatalogError
from coub_archiver.storage.clip_writer import (
    create_clip_dir,
    render_info,
    write_clip_files,
)


def test_info_file_lines() -> None:
    clip = make_clip(title="Cat")

    lines = render_info(clip).split("\n")

    assert lines == [
        "Title: Cat",
        f"Created At: {clip.created_at}",
        "Duration: 12.35",
        "Views: 10",
        "Recoubs: 2",
        "Source: false",
        "Tags: funny, cat",
        "",
    ]


def test_info_file_without_tags_still_ends_with_newline() -> None:
    clip = make_clip(tags=[])
    assert render_info(clip).endswith("Source: false\nTags: \n")


def test_info_file_shows_external_source_url() -> None:
    clip = make_clip(
        external_download={"type": "Youtube", "url": "https://youtu.be/x"}
    )
    assert "Source: https://youtu.be/x\n" in render_info(clip)


def test_preparation_is_idempotent(tmp_path) -> None:
    clip = make_clip(title="Cat")

    out_dir = create_clip_dir(tmp_path, clip)
    write_clip_files(out_dir, clip)
    first_meta = (out_dir / "metadata.json").read_text(encoding="utf-8")
    first_info = (out_dir / "info.txt").read_text(encoding="utf-8")

    again = create_clip_dir(tmp_path, clip)
    write_clip_files(again, clip)

    assert again == out_dir == tmp_path / "Cat"
    assert (out_dir / "metadata.json").read_text(encoding="utf-8") == first_meta
    assert (out_dir / "info.txt").read_text(encoding="utf-8") == first_info


def test_metadata_dump_keeps_full_record(tmp_path) -> None:
    clip = make_clip(title="Cat")
    out_dir = create_clip_dir(tmp_path, clip)
    write_clip_files(out_dir, clip)

    raw = (out_dir / "metadata.json").read_text(encoding="utf-8")
    data = json.loads(raw)

    assert raw.startswith('{\n "id": 1,')
    assert list(data)[:3] == ["id", "permalink", "title"]
    assert data["file_versions"]["mobile"]["video"].endswith("mobile.mp4")
    assert data["tags"] == [{"title": "funny"}, {"title": "cat"}]


def test_directory_name_is_sanitized_with_fallback(tmp_path) -> None:
    assert create_clip_dir(tmp_path, make_clip(title="a/b:c")).parent == tmp_path
    assert create_clip_dir(tmp_path, make_clip(clip_id=7, title="///")).name == (
        "coub_7"
    )


def test_directory_creation_failure_is_fatal(tmp_path) -> None:
    (tmp_path / "Cat").write_text("in the way", encoding="utf-8")
    with pytest.raises(CatalogError):
        create_clip_dir(tmp_path, make_clip(title="Cat"))
