"""
Utilities for handling file paths and deriving local filenames from URLs.
"""

import posixpath
from pathlib import Path
from urllib.parse import unquote, urlparse

from pathvalidate import sanitize_filename

NAME_MAX_BYTES = 255


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def filename_from_url(url: str) -> str:
    """
    Returns the last segment of the URL's path, e.g.
    'https://cdn.example/path/seg.mp4?x=1' -> 'seg.mp4'.
    """
    segment = posixpath.basename(unquote(urlparse(url).path))
    return sanitize_filename(segment)


def safe_title(title: str, fallback: str, suffix: str = "") -> str:
    """
    Sanitizes a clip title for use as a file or directory name. The title is
    shortened so that the name, including `suffix`, fits in NAME_MAX_BYTES.
    """
    max_len = NAME_MAX_BYTES - len(suffix.encode("utf-8"))
    name = sanitize_filename(title.strip(), platform="auto", max_len=max_len)
    return (name or fallback) + suffix
