# src/storage/layout.py — v1
"""Local and remote path conventions for backup artifacts.

Local:  {dumps_root}/{host}/{iso-timestamp}.pgdump[.gz|.bz2|.xz][.gpg|.enc]
Remote: {prefix}/{host}/{filename}
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

DUMP_EXTENSION = ".pgdump"
DEFAULT_PREFIX = "backups"


def dump_dir(dumps_root: Path, host: str) -> Path:
    """Return the per-host directory holding artifacts."""
    return dumps_root / host


def dump_filename(now: datetime) -> str:
    """Return the raw dump filename for a run started at ``now``.

    Matches ``date -Iseconds``: second precision with the UTC offset.
    """
    if now.tzinfo is None:
        now = now.astimezone()
    return f"{now.isoformat(timespec='seconds')}{DUMP_EXTENSION}"


def dump_path(dumps_root: Path, host: str, now: datetime) -> Path:
    return dump_dir(dumps_root, host) / dump_filename(now)


def remote_key(prefix: str, host: str, filename: str) -> str:
    """Return the object key for an artifact."""
    prefix = prefix.strip("/") or DEFAULT_PREFIX
    return f"{prefix}/{host}/{filename}"


def remote_uri(bucket: str, key: str) -> str:
    return f"s3://{bucket}/{key}"
