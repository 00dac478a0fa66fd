"""
Storage Layer.

This package handles all local persistence: reading the catalog listing,
writing per-coub metadata files, and the configuration file.
"""

from .catalog import filter_reposts, load_catalog
from .clip_writer import create_clip_dir, write_clip_files
from .config_manager import ConfigManager

__all__ = [
    "ConfigManager",
    "create_clip_dir",
    "filter_reposts",
    "load_catalog",
    "write_clip_files",
]
