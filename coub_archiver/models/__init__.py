"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the application: catalog records, configuration
and run statistics.
"""

from .config import ArchiveConfig
from .coub import ClipRecord, TemplatedVersions
from .stats import ArchiveStats, ClipResult, GroupResult

__all__ = [
    "ArchiveConfig",
    "ArchiveStats",
    "ClipRecord",
    "ClipResult",
    "GroupResult",
    "TemplatedVersions",
]
