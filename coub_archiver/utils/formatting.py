"""
Helper functions for formatting data into human-readable strings.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2h 34m 12s').
    """
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_clip_duration(duration: float) -> str:
    """
    Formats a clip duration with two decimals, rounding half up on the value as
    written in the listing (12.345 -> '12.35').
    """
    return str(Decimal(str(duration)).quantize(Decimal("0.01"), ROUND_HALF_UP))


def format_source(external_download: Any) -> str:
    """Renders the external-download field for the info file."""
    if isinstance(external_download, dict):
        return str(external_download.get("url") or "true")
    return "true" if external_download else "false"
