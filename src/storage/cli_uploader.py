# src/storage/cli_uploader.py — v1
"""Upload through the aws CLI (UPLOAD_BACKEND=cli, the default).

Operator-supplied S3_OPTIONS are appended to the command verbatim.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from pgbackup.core.errors import UploadError
from pgbackup.core.process import CommandRunner, run_command
from pgbackup.storage.base_uploader import BaseUploader

logger = logging.getLogger(__name__)


class CliUploader(BaseUploader):
    """Runs ``aws s3 cp <path> s3://<bucket>/<key> [options...]``."""

    def __init__(
        self,
        bucket: str,
        extra_options: Sequence[str] = (),
        region: str | None = None,
        endpoint_url: str | None = None,
        runner: CommandRunner = run_command,
        executable: str = "aws",
    ) -> None:
        super().__init__(bucket)
        self._extra_options = list(extra_options)
        self._region = region
        self._endpoint_url = endpoint_url
        self._runner = runner
        self._executable = executable

    def build_command(self, local_path: Path, key: str) -> list[str]:
        argv = [self._executable, "s3", "cp", str(local_path), self.uri_for(key)]
        if self._region:
            argv += ["--region", self._region]
        if self._endpoint_url:
            argv += ["--endpoint-url", self._endpoint_url]
        argv += self._extra_options
        return argv

    def upload(self, local_path: Path, key: str) -> None:
        result = self._runner(self.build_command(local_path, key))
        if not result.ok:
            detail = f": {result.stderr.splitlines()[-1]}" if result.stderr else ""
            raise UploadError(f"aws s3 cp exited with status {result.returncode}{detail}")
        logger.debug("aws s3 cp finished: %s", self.uri_for(key))
