# src/pipeline/stages/upload.py — v1
"""Upload stage: copy the final artifact to the object store, if configured.

Upload failure only changes the reported outcome; it never fails the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pgbackup.core.errors import UploadError
from pgbackup.core.models import RunOutcome
from pgbackup.storage.base_uploader import BaseUploader
from pgbackup.storage.layout import remote_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    outcome: RunOutcome
    key: str | None = None
    uri: str | None = None


def upload_artifact(
    path: Path,
    host: str,
    prefix: str,
    uploader: BaseUploader | None,
) -> UploadResult:
    """Upload ``path`` to ``{prefix}/{host}/{filename}``."""
    if uploader is None:
        logger.info("S3 not configured, backup stored locally only")
        return UploadResult(outcome=RunOutcome.SUCCESS_LOCAL_ONLY)

    key = remote_key(prefix, host, path.name)
    uri = uploader.uri_for(key)
    logger.info("Uploading dump to %s", uri)

    try:
        uploader.upload(path, key)
    except UploadError as e:
        logger.error("Failed to upload to %s: %s", uri, e)
        return UploadResult(outcome=RunOutcome.SUCCESS_UPLOAD_FAILED, key=key, uri=uri)
    except Exception:
        logger.exception("Upload backend raised unexpectedly")
        return UploadResult(outcome=RunOutcome.SUCCESS_UPLOAD_FAILED, key=key, uri=uri)

    logger.info("Successfully uploaded to %s", uri)
    return UploadResult(outcome=RunOutcome.SUCCESS_UPLOADED, key=key, uri=uri)
