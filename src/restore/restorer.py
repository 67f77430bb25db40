# src/restore/restorer.py — v1
"""Restore a backup artifact produced by the pipeline.

Peels the extension chain from the outside in: encryption (.gpg / .enc),
then compression (.gz / .bz2 / .xz), leaving a pg_dump custom-format file.
All intermediate files live in a temporary directory that is always
removed; the source artifact is never modified.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pgbackup.core.errors import RestoreError
from pgbackup.core.process import CommandRunner, run_command
from pgbackup.pipeline.stages.dump import ConnectionParams

logger = logging.getLogger(__name__)

# suffix -> method
ENCRYPTION_SUFFIXES: dict[str, str] = {".gpg": "gpg", ".enc": "openssl"}
# suffix -> decompressor argv prefix (writes to stdout)
DECOMPRESSORS: dict[str, list[str]] = {
    ".gz": ["gunzip", "-c"],
    ".bz2": ["bunzip2", "-c"],
    ".xz": ["unxz", "-c"],
}
PGDUMP_MAGIC = b"PGDMP"


@dataclass(frozen=True)
class RestorePlan:
    """Steps needed to turn an artifact back into a plain dump."""

    encryption: str | None
    compression: str | None

    @classmethod
    def for_path(cls, path: Path, method: str | None = None) -> RestorePlan:
        """Read the steps off the extension chain.

        ``method`` names the cipher of an artifact whose name carries no
        encryption suffix (a renamed download, say). A recognised suffix wins.
        """
        name = path.name
        encryption = None
        for suffix, suffix_method in ENCRYPTION_SUFFIXES.items():
            if name.endswith(suffix):
                encryption = suffix_method
                name = name[: -len(suffix)]
                break
        if encryption is None:
            encryption = method
        elif method is not None and method != encryption:
            logger.warning(
                "%s looks %s encrypted; ignoring requested method %s",
                path.name, encryption, method,
            )
        compression = next(
            (suffix for suffix in DECOMPRESSORS if name.endswith(suffix)), None
        )
        return cls(encryption=encryption, compression=compression)


def build_decrypt_command(method: str, source: Path, target: Path) -> list[str]:
    if method == "gpg":
        return [
            "gpg", "--batch", "--yes",
            "--pinentry-mode", "loopback", "--no-symkey-cache",
            "--passphrase-fd", "0",
            "--decrypt",
            "--output", str(target),
            str(source),
        ]
    return [
        "openssl", "enc", "-d", "-aes-256-cbc",
        "-pass", "stdin",
        "-in", str(source),
        "-out", str(target),
    ]


class BackupRestorer:
    """Decode and optionally pg_restore a backup artifact.

    Args:
        key: Encryption key; required for encrypted artifacts.
        method: Cipher ("gpg" or "openssl") for artifacts without a .gpg/.enc suffix.
        runner: Executes external programs.
    """

    def __init__(
        self,
        key: str = "",
        method: str | None = None,
        runner: CommandRunner = run_command,
    ) -> None:
        if method is not None and method not in ENCRYPTION_SUFFIXES.values():
            raise ValueError(f"Unsupported encryption method: {method!r}")
        self._key = key
        self._method = method
        self._runner = runner

    def extract(self, artifact: Path, output: Path) -> Path:
        """Write the plain pg_dump file for ``artifact`` to ``output``."""
        with tempfile.TemporaryDirectory(prefix="pgbackup-restore-") as tmp:
            plain = self._decode(artifact, Path(tmp))
            output.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(plain, output)
        logger.info("Restored backup to %s", output)
        return output

    def restore(self, artifact: Path, conn: ConnectionParams) -> None:
        """Decode ``artifact`` and pg_restore it into ``conn.database``."""
        with tempfile.TemporaryDirectory(prefix="pgbackup-restore-") as tmp:
            plain = self._decode(artifact, Path(tmp))
            logger.info("Restoring to PostgreSQL database %r", conn.database)
            result = self._runner(
                [
                    "pg_restore",
                    "-h", conn.host,
                    "-p", str(conn.port),
                    "-U", conn.user,
                    "-d", conn.database,
                    "--clean", "--if-exists", "--verbose",
                    str(plain),
                ],
                env={"PGPASSWORD": conn.password} if conn.password else None,
            )
        if not result.ok:
            raise RestoreError(f"pg_restore exited with status {result.returncode}")
        logger.info("Database %r has been restored from %s", conn.database, artifact)

    def _decode(self, artifact: Path, workdir: Path) -> Path:
        if not artifact.is_file():
            raise RestoreError(f"Backup file {artifact} not found")

        plan = RestorePlan.for_path(artifact, self._method)
        current = artifact

        if plan.encryption is not None:
            if not self._key:
                raise RestoreError(
                    f"{plan.encryption} encrypted file detected but no encryption key provided"
                )
            target = workdir / _strip_encryption_suffix(current.name)
            logger.info("Decrypting %s file", plan.encryption)
            result = self._runner(
                build_decrypt_command(plan.encryption, current, target),
                input_text=self._key + "\n",
            )
            if not result.ok or not target.is_file():
                raise RestoreError(
                    f"Decryption with {plan.encryption} failed (exit status {result.returncode}); "
                    "wrong key?"
                )
            current = target

        if plan.compression is not None:
            target = workdir / current.name[: -len(plan.compression)]
            logger.info("Decompressing %s file", plan.compression)
            result = self._runner(
                [*DECOMPRESSORS[plan.compression], str(current)], stdout_path=target,
            )
            if not result.ok:
                raise RestoreError(
                    f"Decompression of {current.name} failed (exit status {result.returncode})"
                )
            current = target

        with open(current, "rb") as f:
            if f.read(len(PGDUMP_MAGIC)) != PGDUMP_MAGIC:
                raise RestoreError(
                    f"{current.name} is not a pg_dump custom-format archive; wrong key?"
                )
        return current


def _strip_encryption_suffix(name: str) -> str:
    for suffix in ENCRYPTION_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name
