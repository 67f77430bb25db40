# src/pipeline/orchestrator.py — v1
"""Pipeline orchestrator: one backup run per invocation.

State machine:
  DUMPING -> COMPRESSING -> ENCRYPTING -> UPLOADING -> CLEANING -> NOTIFYING -> DONE
  DUMPING -> CLEANING -> NOTIFYING -> DONE               (dump failed)

Only the dump decides the exit status. Compression, encryption, upload and
notification failures degrade the outcome or the artifact but never abort.

Runs must not overlap on the same dumps directory; the external scheduler
starts a run only after the previous process has exited.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable

from pgbackup.config.settings import Settings
from pgbackup.core.errors import DumpError
from pgbackup.core.models import (
    Artifact,
    ArtifactStage,
    PipelineStage,
    RunOutcome,
    RunResult,
)
from pgbackup.core.process import CommandRunner, run_command
from pgbackup.logging.context import set_run_context, set_stage_context
from pgbackup.notify.webhook import WebhookNotifier
from pgbackup.pipeline.ledger import CleanupLedger
from pgbackup.pipeline.stages.compression import compress
from pgbackup.pipeline.stages.dump import ConnectionParams, dump_database
from pgbackup.pipeline.stages.encryption import encrypt
from pgbackup.pipeline.stages.upload import upload_artifact
from pgbackup.storage.base_uploader import BaseUploader
from pgbackup.storage.layout import dump_path
from pgbackup.storage.uploader_factory import create_uploader

logger = logging.getLogger(__name__)

_UNSET = object()


def _now() -> datetime:
    return datetime.now().astimezone()


class BackupPipeline:
    """Runs dump -> compress -> encrypt -> upload -> cleanup -> notify.

    Args:
        settings: Validated application settings.
        runner: Executes external programs (pg_dump, gzip, gpg, aws, ...).
        uploader: Upload backend; defaults to the one selected by settings
            (None when S3_BUCKET is unset).
        notifier: Webhook notifier; defaults to one built from settings.
        clock: Returns the run start time (timestamped filename and subject).
    """

    def __init__(
        self,
        settings: Settings,
        runner: CommandRunner = run_command,
        uploader: BaseUploader | None | object = _UNSET,
        notifier: WebhookNotifier | None = None,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._settings = settings
        self._runner = runner
        if uploader is _UNSET:
            uploader = create_uploader(settings, runner=runner)
        self._uploader: BaseUploader | None = uploader  # type: ignore[assignment]
        self._notifier = notifier or WebhookNotifier(
            url=settings.webhook_url,
            timeout_s=settings.webhook_timeout_s,
            retries=settings.webhook_retries,
            retry_delay_s=settings.webhook_retry_delay_s,
        )
        self._clock = clock

    @property
    def connection(self) -> ConnectionParams:
        s = self._settings
        return ConnectionParams(
            host=s.postgres_host,
            port=s.postgres_port,
            user=s.postgres_user,
            password=s.postgres_password,
            database=s.postgres_db,
        )

    def run(self) -> RunResult:
        """Execute one backup run. Never raises for stage failures."""
        started_at = self._clock()
        run_id = uuid.uuid4().hex[:12]
        host = self._settings.postgres_host
        set_run_context(run_id, host)

        result = RunResult(
            run_id=run_id,
            outcome=RunOutcome.DUMP_FAILED,
            subject=f"{self._settings.title} - {started_at:%Y-%m-%d %H:%M:%S}",
            started_at=started_at,
        )
        ledger = CleanupLedger(cleanup_enabled=self._settings.cleanup_enabled)
        raw_path = dump_path(self._settings.dumps_root, host, started_at)
        logger.info("Starting backup run %s", run_id)

        try:
            self._produce(result, ledger, raw_path)
        finally:
            self._enter(result, PipelineStage.CLEANING)
            report = ledger.finalize()
            result.tracked_files = ledger.entries
            result.removed_files = report.removed
            result.retained_file = report.retained

        self._notify(result)
        self._enter(result, PipelineStage.DONE)
        result.completed_at = self._clock()
        set_stage_context(None)
        logger.info(
            "Backup run %s finished: %s", run_id, result.outcome.status_text,
        )
        return result

    # --- Stages ---

    def _produce(self, result: RunResult, ledger: CleanupLedger, raw_path: Path) -> None:
        s = self._settings

        self._enter(result, PipelineStage.DUMPING)
        try:
            dump_database(self.connection, raw_path, runner=self._runner)
        except DumpError as e:
            result.error = str(e)
            # A half-written dump is still ours to clean up.
            ledger.track(raw_path)
            return
        ledger.track(raw_path)
        artifact = Artifact(path=raw_path)

        self._enter(result, PipelineStage.COMPRESSING)
        artifact = artifact.advance(
            compress(artifact.path, s.compression_type, runner=self._runner),
            ArtifactStage.COMPRESSED,
        )
        ledger.track(artifact.path)

        self._enter(result, PipelineStage.ENCRYPTING)
        artifact = artifact.advance(
            encrypt(artifact.path, s.encryption_method, s.encryption_key, runner=self._runner),
            ArtifactStage.ENCRYPTED,
        )
        ledger.track(artifact.path)

        result.artifact = artifact.finalized()
        logger.info("Final backup file: %s", artifact.path)

        self._enter(result, PipelineStage.UPLOADING)
        upload = upload_artifact(artifact.path, s.postgres_host, s.s3_prefix, self._uploader)
        result.outcome = upload.outcome
        result.remote_uri = upload.uri

    def _notify(self, result: RunResult) -> None:
        self._enter(result, PipelineStage.NOTIFYING)
        if not self._notifier.enabled:
            logger.info("No webhook URL configured, skipping notification")
            return
        description = describe_outcome(result, self._settings)
        if result.outcome is RunOutcome.DUMP_FAILED:
            result.notified = self._notifier.send_failure(result.subject, description)
        else:
            result.notified = self._notifier.send(
                result.subject, result.outcome.status_text, description
            )

    @staticmethod
    def _enter(result: RunResult, stage: PipelineStage) -> None:
        set_stage_context(stage.value)
        result.stages.append(stage)


def describe_outcome(result: RunResult, settings: Settings) -> str:
    """One-sentence description of a run, used as the generic webhook description."""
    database = f"{settings.postgres_db}@{settings.postgres_host}"
    if result.outcome is RunOutcome.DUMP_FAILED:
        return f"Dump of {database} failed: {result.error or 'unknown error'}"

    filename = result.artifact.filename if result.artifact else "backup"
    if result.outcome is RunOutcome.SUCCESS_UPLOADED:
        return f"Backup {filename} of {database} uploaded to {result.remote_uri}"
    if result.outcome is RunOutcome.SUCCESS_UPLOAD_FAILED:
        return f"Backup {filename} of {database} could not be uploaded to {result.remote_uri}"
    if result.retained_file is not None:
        return f"Backup {filename} of {database} kept locally at {result.retained_file}"
    return f"Backup {filename} of {database} completed; local copy removed by cleanup"
