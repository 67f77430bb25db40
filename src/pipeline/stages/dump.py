# src/pipeline/stages/dump.py — v1
"""Dump stage: pg_dump in custom format into the destination path."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pgbackup.core.errors import DumpError
from pgbackup.core.process import CommandRunner, run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionParams:
    host: str
    port: int
    user: str
    password: str
    database: str

    def __repr__(self) -> str:
        return (
            f"ConnectionParams(host={self.host!r}, port={self.port}, "
            f"user={self.user!r}, database={self.database!r})"
        )


def build_dump_command(conn: ConnectionParams, destination: Path) -> list[str]:
    """pg_dump argv. The password travels in PGPASSWORD, never in argv."""
    return [
        "pg_dump",
        "-h", conn.host,
        "-U", conn.user,
        "-p", str(conn.port),
        "--format=custom",
        "--clean",
        "--verbose",
        "--create",
        "--file", str(destination),
        conn.database,
    ]


def dump_database(
    conn: ConnectionParams,
    destination: Path,
    runner: CommandRunner = run_command,
) -> Path:
    """Run pg_dump synchronously.

    The destination may be left behind half-written on failure; the caller
    tracks it for cleanup either way.

    Returns:
        ``destination`` on exit status 0.

    Raises:
        DumpError: pg_dump exited nonzero.
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Cannot create dumps directory %s: %s", destination.parent, e)
        raise DumpError(1, f"cannot create {destination.parent}: {e.strerror}") from e

    logger.info("Dumping %s from %s:%d", conn.database, conn.host, conn.port)

    result = runner(
        build_dump_command(conn, destination),
        env={"PGPASSWORD": conn.password},
    )
    if not result.ok:
        detail = result.stderr.splitlines()[-1] if result.stderr else ""
        logger.error("Failed to execute dump (exit status %d)", result.returncode)
        raise DumpError(result.returncode, detail)

    logger.info("Dump executed successfully: %s", destination)
    return destination
