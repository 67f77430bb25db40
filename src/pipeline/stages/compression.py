# src/pipeline/stages/compression.py — v1
"""Compression stage: gzip / bzip2 / xz at maximum level, or pass-through.

Best-effort: an unknown selector or a failing compressor leaves the input
untouched and returns it; compression never fails a run.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pgbackup.core.process import CommandRunner, run_command
from pgbackup.pipeline.stages.partial import discard_partial

logger = logging.getLogger(__name__)

# selector -> (program, suffix the program appends)
COMPRESSORS: dict[str, tuple[str, str]] = {
    "gzip": ("gzip", ".gz"),
    "bzip2": ("bzip2", ".bz2"),
    "xz": ("xz", ".xz"),
}

NO_COMPRESSION = ("none", "")


def compress(
    path: Path,
    compression_type: str,
    runner: CommandRunner = run_command,
) -> Path:
    """Compress ``path`` in place and return the path of the current artifact.

    The compressor replaces ``name`` with ``name + suffix`` and removes the
    original.
    """
    if compression_type in NO_COMPRESSION:
        logger.info("No additional compression applied (pg_dump custom format already compressed)")
        return path

    codec = COMPRESSORS.get(compression_type)
    if codec is None:
        logger.warning("Unknown compression type %r, skipping compression", compression_type)
        return path

    program, suffix = codec
    logger.info("Compressing with %s", program)
    compressed = path.with_name(path.name + suffix)
    result = runner([program, "-9", str(path)])

    if result.ok and compressed.is_file():
        return compressed

    logger.error(
        "%s failed (exit status %d), keeping uncompressed file", program, result.returncode
    )
    if not path.is_file() and compressed.is_file():
        # The compressor consumed its input before failing; the output is all that is left.
        return compressed
    discard_partial(compressed)
    return path
