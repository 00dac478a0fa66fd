"""
Creates a coub's output directory and writes its metadata and info files.
"""

import json
from pathlib import Path

from coub_archiver.exceptions import CatalogError
from coub_archiver.models.coub import ClipRecord
from coub_archiver.utils.formatting import format_clip_duration, format_source
from coub_archiver.utils.path import create_dir, safe_title

METADATA_FILE = "metadata.json"
INFO_FILE = "info.txt"


def clip_dir_name(clip: ClipRecord, suffix: str = "") -> str:
    return safe_title(clip.title, fallback=f"coub_{clip.id}", suffix=suffix)


def create_clip_dir(root_dir: Path, clip: ClipRecord) -> Path:
    """Creates '<root_dir>/<title>' if needed and returns it."""
    out_dir = Path(root_dir) / clip_dir_name(clip)
    try:
        create_dir(out_dir)
    except OSError as e:
        raise CatalogError(f"Could not create directory '{out_dir}': {e}") from e
    return out_dir


def render_info(clip: ClipRecord) -> str:
    lines = [
        f"Title: {clip.title}",
        f"Created At: {clip.created_at}",
        f"Duration: {format_clip_duration(clip.duration)}",
        f"Views: {clip.views_count}",
        f"Recoubs: {clip.recoubs_count}",
        f"Source: {format_source(clip.external_download)}",
        f"Tags: {', '.join(clip.tag_titles)}",
    ]
    return "\n".join(lines) + "\n"


def render_metadata(clip: ClipRecord) -> str:
    # Declared fields first in model order, then any extra listing keys
    return json.dumps(clip.model_dump(mode="json"), indent=1, ensure_ascii=False)


def write_clip_files(out_dir: Path, clip: ClipRecord) -> None:
    """
    Writes metadata.json and info.txt, overwriting previous versions.

    Raises:
        CatalogError: If either file cannot be written.
    """
    for name, content in (
        (METADATA_FILE, render_metadata(clip)),
        (INFO_FILE, render_info(clip)),
    ):
        path = out_dir / name
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Could not write '{path}': {e}") from e
