# src/storage/uploader_factory.py — v1
"""Factory: instantiate the upload backend from configuration."""

from __future__ import annotations

from pgbackup.config.settings import Settings
from pgbackup.core.process import CommandRunner, run_command
from pgbackup.storage.base_uploader import BaseUploader
from pgbackup.storage.cli_uploader import CliUploader


def create_uploader(
    settings: Settings, runner: CommandRunner = run_command
) -> BaseUploader | None:
    """Create the upload backend selected by UPLOAD_BACKEND.

    Returns:
        BaseUploader instance, or None when S3_BUCKET is not set.

    Raises:
        ValueError: If the backend type is not supported.
    """
    if not settings.upload_enabled:
        return None

    if settings.upload_backend == "cli":
        return CliUploader(
            bucket=settings.s3_bucket,
            extra_options=settings.s3_options_list,
            region=settings.s3_region or None,
            endpoint_url=settings.s3_endpoint_url or None,
            runner=runner,
        )

    if settings.upload_backend == "boto3":
        from pgbackup.storage.s3_uploader import S3Uploader

        return S3Uploader(
            bucket=settings.s3_bucket,
            region=settings.s3_region or None,
            endpoint_url=settings.s3_endpoint_url or None,
        )

    raise ValueError(f"Unsupported upload backend: {settings.upload_backend!r}")
