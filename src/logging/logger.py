# src/logging/logger.py — v1
"""JSON and text formatters and the one-call logging setup.

All diagnostics go to stderr; stdout is left to the CLI for command output.
Every record carries the current run_id, host and stage (see context.py).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pgbackup.logging.context import get_context

# httpx logs every request at INFO, including the webhook URL
_QUIET_LOGGERS = ("httpx", "httpcore")


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One flat JSON object per line; context fields sit beside the message."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            **get_context().as_dict(),
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter, mirrors what cron writes to its log."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            _timestamp(record).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.host:
            parts.append(f"[{ctx.host}]")
        if ctx.stage:
            parts.append(f"({ctx.stage})")
        parts.append(f"- {record.getMessage()}")
        line = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: Path | None = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure the pgbackup logger tree.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" or "text".
        log_file: Also append to this file, rotated by size (None = stderr only).
        max_bytes: Rotate the log file once it reaches this size.
        backup_count: Rotated files to keep.
    """
    root_logger = logging.getLogger("pgbackup")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Re-init replaces handlers instead of stacking them
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file = log_file.expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
