# src/storage/s3_uploader.py — v1
"""boto3 upload backend (UPLOAD_BACKEND=boto3).

Supports AWS S3, MinIO, and other S3-compatible storage.
Requires 'boto3' package: pip install pgbackup-agent[boto3].
"""

from __future__ import annotations

import logging
from pathlib import Path

from pgbackup.core.errors import UploadError
from pgbackup.storage.base_uploader import BaseUploader

logger = logging.getLogger(__name__)


class S3Uploader(BaseUploader):
    """Upload artifacts with boto3's managed transfer."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        client: object | None = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            bucket: S3 bucket name.
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
            client: Pre-built S3 client (tests).
        """
        super().__init__(bucket)
        if client is None:
            try:
                import boto3
            except ImportError as e:
                raise ImportError(
                    "boto3 package required for UPLOAD_BACKEND=boto3: "
                    "pip install pgbackup-agent[boto3]"
                ) from e

            kwargs: dict = {}
            if region:
                kwargs["region_name"] = region
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("s3", **kwargs)
        self._s3 = client

    def upload(self, local_path: Path, key: str) -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self._s3.upload_file(str(local_path), self._bucket, key)
        except (BotoCoreError, ClientError, OSError) as e:
            raise UploadError(f"S3 upload of {local_path.name} failed: {e}") from e
        logger.debug("S3 upload: %s (%d bytes)", self.uri_for(key), local_path.stat().st_size)
