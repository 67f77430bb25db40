# src/core/models.py — v1
"""Core domain models: Artifact, RunOutcome, RunResult."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class ArtifactStage(str, Enum):
    """Logical stage an artifact has reached."""

    RAW = "raw"
    COMPRESSED = "compressed"
    ENCRYPTED = "encrypted"


class Artifact(BaseModel):
    """The single backup file as it exists at a given pipeline stage.

    Immutable: each stage returns a new Artifact instead of mutating the
    previous one.
    """

    model_config = {"frozen": True}

    path: Path
    stage: ArtifactStage = ArtifactStage.RAW
    final: bool = False

    @property
    def filename(self) -> str:
        return self.path.name

    def advance(self, path: Path, stage: ArtifactStage) -> Artifact:
        """Return the artifact produced by a transform stage.

        A stage that passed the file through unchanged keeps the current stage.
        """
        if path == self.path:
            return self
        return Artifact(path=path, stage=stage)

    def finalized(self) -> Artifact:
        return self.model_copy(update={"final": True})


class PipelineStage(str, Enum):
    """States of one pipeline invocation, in the order they can be visited."""

    DUMPING = "dumping"
    COMPRESSING = "compressing"
    ENCRYPTING = "encrypting"
    UPLOADING = "uploading"
    CLEANING = "cleaning"
    NOTIFYING = "notifying"
    DONE = "done"


class RunOutcome(str, Enum):
    """Terminal outcome of one pipeline invocation."""

    DUMP_FAILED = "dump_failed"
    SUCCESS_LOCAL_ONLY = "success_local_only"
    SUCCESS_UPLOADED = "success_uploaded"
    SUCCESS_UPLOAD_FAILED = "success_upload_failed"

    @property
    def status_text(self) -> str:
        """Status string sent to the webhook."""
        return _STATUS_TEXT[self]

    @property
    def succeeded(self) -> bool:
        return self is not RunOutcome.DUMP_FAILED

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1


_STATUS_TEXT: dict[RunOutcome, str] = {
    RunOutcome.DUMP_FAILED: "Failure",
    RunOutcome.SUCCESS_LOCAL_ONLY: "Success - Local Only",
    RunOutcome.SUCCESS_UPLOADED: "Success - Uploaded to S3",
    RunOutcome.SUCCESS_UPLOAD_FAILED: "Success - S3 Upload Failed",
}


class RunResult(BaseModel):
    """Summary of one pipeline invocation, returned by the orchestrator."""

    run_id: str
    outcome: RunOutcome
    subject: str
    started_at: datetime
    completed_at: datetime | None = None
    artifact: Artifact | None = None
    remote_uri: str | None = None
    tracked_files: list[Path] = Field(default_factory=list)
    removed_files: list[Path] = Field(default_factory=list)
    retained_file: Path | None = None
    notified: bool | None = None
    stages: list[PipelineStage] = Field(default_factory=list)
    error: str | None = None

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code
