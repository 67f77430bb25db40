# src/storage/base_uploader.py — v1
"""Abstract object-store upload interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pgbackup.storage.layout import remote_uri


class BaseUploader(ABC):
    """Copies a local artifact to ``s3://{bucket}/{key}``."""

    def __init__(self, bucket: str) -> None:
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def uri_for(self, key: str) -> str:
        return remote_uri(self._bucket, key)

    @abstractmethod
    def upload(self, local_path: Path, key: str) -> None:
        """Upload the file.

        Raises:
            UploadError: The object store did not accept the file.
        """
