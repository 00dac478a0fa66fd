"""
Structured logging system for better log analysis and debugging.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from coub_archiver.models.stats import ArchiveStats, ClipResult, GroupResult


class StructuredLogger:
    """
    Enhanced logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("coub_archiver")
        logger.info("asset_downloaded",
                    clip_id="12345",
                    group="images",
                    url="https://...")
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            json_log_path = log_dir / f"coub_archiver_{timestamp}.jsonl"
            self._json_file = open(json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        """Format message for console output."""
        parts = [f"[{event}]"]
        for key, value in context.items():
            if key not in ("level", "timestamp"):
                parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        """Write structured log entry to JSON file."""
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, TypeError, ValueError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _log(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            # Titles and URLs may contain brackets Rich would read as markup
            self._logger.log(
                level, self._format_message(event, **context), extra={"markup": False}
            )
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        """Log debug event."""
        self._log(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        """Log info event."""
        self._log(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        """Log warning event."""
        self._log(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        """Log error event."""
        self._log(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class ClipLogger:
    """Logger bound to one clip; every entry carries clip_id and title."""

    def __init__(self, logger: StructuredLogger, clip_id: Any, title: str):
        self.logger = logger
        self.context = {"clip_id": str(clip_id), "title": title}

    def clip_started(self):
        self.logger.info("clip_download_started", **self.context)

    def clip_completed(self, result: ClipResult):
        """Log the joined outcome of all groups for the clip."""
        self.logger.info(
            "clip_download_completed",
            **self.context,
            downloaded=result.downloaded,
            failed=result.failed,
            aborted_groups=[g.group for g in result.groups if g.aborted],
        )

    def group_started(self, group: str, total: int):
        self.logger.debug("group_started", **self.context, group=group, total=total)

    def group_completed(self, result: GroupResult):
        self.logger.info(
            "group_completed",
            **self.context,
            group=result.group,
            downloaded=result.downloaded,
            failed=result.failed,
            aborted=result.aborted,
        )

    def group_crashed(self, group: str, error: BaseException):
        self.logger.error(
            "group_crashed",
            **self.context,
            group=group,
            error=f"{type(error).__name__}: {error}",
        )

    def asset_downloaded(self, group: str, label: str, url: str, path: str):
        self.logger.debug(
            "asset_downloaded",
            **self.context,
            group=group,
            asset=label,
            url=url,
            path=path,
        )

    def asset_missing(self, group: str, label: str):
        self.logger.warning("asset_missing", **self.context, group=group, asset=label)

    def asset_failed(self, group: str, label: str, url: str, error: BaseException):
        """Log a single asset failure; the caller decides whether to continue."""
        self.logger.error(
            "asset_download_failed",
            **self.context,
            group=group,
            asset=label,
            url=url,
            error=str(getattr(error, "cause", error)),
        )


class SessionLogger:
    """Specialized logger for session events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def session_started(
        self, user: str, total_clips: int, reposts_skipped: int, max_workers: int
    ):
        """Log session started."""
        self.logger.info(
            "session_started",
            user=user,
            total_clips=total_clips,
            reposts_skipped=reposts_skipped,
            max_workers=max_workers,
        )

    def clip_prepared(self, clip_id: Any, title: str, out_dir: Path):
        self.logger.debug(
            "clip_prepared", clip_id=str(clip_id), title=title, out_dir=str(out_dir)
        )

    def session_completed(self, duration_s: float, stats: ArchiveStats):
        """Log session completed."""
        self.logger.info(
            "session_completed",
            duration_s=round(duration_s, 2),
            clips_completed=stats.clips_completed,
            clips_with_failures=stats.clips_with_failures,
            assets_downloaded=stats.assets_downloaded,
            assets_failed=stats.assets_failed,
            total_size_mb=round(stats.total_size_downloaded / (1024 * 1024), 2),
        )

    def session_failed(self, error: BaseException):
        self.logger.error("session_failed", error=str(error))


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, SessionLogger]:
    """
    Create the base structured logger and its session logger.

    Returns:
        Tuple of (base_logger, session_logger)
    """
    base = StructuredLogger("coub_archiver", log_dir=log_dir, enable_json=enable_json)
    session = SessionLogger(base)

    return base, session
