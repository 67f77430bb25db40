# src/pipeline/stages/partial.py — v1
"""Removal of half-written tool output."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def discard_partial(target: Path) -> None:
    """Remove output a failed tool left behind; it never becomes the artifact."""
    try:
        target.unlink()
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning("Could not remove partial output %s: %s", target, e)
        return
    logger.info("Removed partial output %s", target)
