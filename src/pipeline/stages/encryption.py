# src/pipeline/stages/encryption.py — v1
"""Encryption stage: symmetric AES-256 via gpg or openssl.

The passphrase reaches the tool on stdin only. The plaintext is deleted only
after the tool exited 0 and the ciphertext exists on disk; any other result
keeps the plaintext, removes any partial ciphertext, and returns the plaintext.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pgbackup.core.process import CommandRunner, run_command
from pgbackup.pipeline.stages.partial import discard_partial

logger = logging.getLogger(__name__)

SUFFIXES: dict[str, str] = {
    "gpg": ".gpg",
    "openssl": ".enc",
}


def build_encrypt_command(method: str, source: Path, target: Path) -> list[str]:
    if method == "gpg":
        return [
            "gpg", "--batch", "--yes",
            "--pinentry-mode", "loopback", "--no-symkey-cache",
            "--passphrase-fd", "0",
            "--symmetric", "--cipher-algo", "AES256",
            "--output", str(target),
            str(source),
        ]
    if method == "openssl":
        return [
            "openssl", "enc", "-aes-256-cbc", "-salt",
            "-pass", "stdin",
            "-in", str(source),
            "-out", str(target),
        ]
    raise ValueError(f"Unsupported encryption method: {method!r}")


def encrypt(
    path: Path,
    method: str,
    secret: str,
    runner: CommandRunner = run_command,
) -> Path:
    """Encrypt ``path`` and return the path of the current artifact."""
    if not secret:
        logger.info("No encryption key provided, skipping encryption")
        return path

    suffix = SUFFIXES.get(method)
    if suffix is None:
        logger.warning("Unknown encryption method %r, skipping encryption", method)
        return path

    target = path.with_name(path.name + suffix)
    logger.info("Encrypting with %s", method)
    result = runner(build_encrypt_command(method, path, target), input_text=secret + "\n")

    if result.ok and target.is_file():
        path.unlink(missing_ok=True)
        logger.info("Encrypted backup written to %s", target)
        return target

    logger.error(
        "Encryption failed (exit status %d, output %s), keeping original file",
        result.returncode, "present" if target.exists() else "missing",
    )
    discard_partial(target)
    return path
