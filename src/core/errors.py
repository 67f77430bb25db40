# src/core/errors.py — v1
"""Exception hierarchy for the backup agent.

Only DumpError is run-fatal. Every other stage failure is translated into a
fallback artifact path or an outcome at the stage boundary.
"""

from __future__ import annotations


class BackupError(Exception):
    """Base class for backup agent errors."""


class DumpError(BackupError):
    """pg_dump exited with a nonzero status (or could not be started)."""

    def __init__(self, returncode: int, detail: str = ""):
        self.returncode = returncode
        self.detail = detail
        message = f"pg_dump exited with status {returncode}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UploadError(BackupError):
    """An upload backend could not copy the artifact to the object store."""


class RestoreError(BackupError):
    """A backup artifact could not be decoded or restored."""
