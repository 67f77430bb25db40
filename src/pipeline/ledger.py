# src/pipeline/ledger.py — v1
"""Cleanup ledger: every file a run writes, in creation order.

Created empty per run, appended to as stages produce files, consumed once by
finalize() and then discarded. Never persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class CleanupReport:
    """What finalize() did."""

    removed: list[Path] = field(default_factory=list)
    already_absent: list[Path] = field(default_factory=list)
    retained: Path | None = None


class CleanupLedger:
    """Tracks run artifacts and removes them according to the retention policy.

    Args:
        cleanup_enabled: True removes every tracked file; False keeps the last
            tracked file (the final artifact) and removes the rest.
    """

    def __init__(self, cleanup_enabled: bool = True) -> None:
        self._cleanup_enabled = cleanup_enabled
        self._entries: list[Path] = []
        self._finalized = False

    @property
    def entries(self) -> list[Path]:
        return list(self._entries)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def __len__(self) -> int:
        return len(self._entries)

    def track(self, path: Path) -> bool:
        """Append ``path`` if it exists on disk and is not already tracked."""
        if self._finalized:
            raise RuntimeError("Cleanup ledger already finalized")
        if not path.is_file():
            logger.debug("Not tracking %s: no such file", path)
            return False
        if path in self._entries:
            return False
        self._entries.append(path)
        logger.info("Added to cleanup list: %s", path)
        return True

    def finalize(self) -> CleanupReport:
        """Delete tracked files. Must be called exactly once per run."""
        if self._finalized:
            raise RuntimeError("Cleanup ledger already finalized")
        self._finalized = True

        report = CleanupReport()
        if self._cleanup_enabled:
            logger.info("Cleaning up all local files")
            to_remove = self._entries
        else:
            logger.info("Cleanup disabled: keeping final backup file, removing intermediate files")
            to_remove = self._entries[:-1]
            if self._entries:
                report.retained = self._entries[-1]

        for path in to_remove:
            if _remove(path):
                report.removed.append(path)
            else:
                report.already_absent.append(path)

        if report.retained is not None:
            if report.retained.is_file():
                logger.info("Keeping final backup file: %s", report.retained)
            else:
                logger.warning("Final backup file is missing: %s", report.retained)
        elif not self._cleanup_enabled:
            logger.info("No backup file to keep")

        logger.info(
            "Cleanup completed: %d removed, %d already absent",
            len(report.removed), len(report.already_absent),
        )
        return report


def _remove(path: Path) -> bool:
    """Delete a file. Returns False if it was already gone."""
    try:
        path.unlink()
    except FileNotFoundError:
        logger.info("File already removed: %s", path)
        return False
    logger.info("Removing: %s", path)
    return True
