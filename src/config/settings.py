# src/config/settings.py — v1
"""Typed configuration loaded from the environment via pydantic-settings.

Single source of truth for the backup agent. Field names match the
environment variables the container is configured with (POSTGRES_HOST,
COMPRESSION_TYPE, S3_BUCKET, ...). Validation runs once, before any
backup run is attempted.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Literal

from pydantic import ByteSize, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Backup agent settings loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === DATABASE (required) ===
    postgres_host: str
    postgres_port: int
    postgres_user: str
    postgres_password: str
    postgres_db: str

    # === SCHEDULE / NOTIFICATION TITLE (required) ===
    title: str
    # Consumed by the external scheduler only.
    cron_time: str

    # === ENCRYPTION ===
    encryption_key: str = ""
    encryption_method: Literal["gpg", "openssl"] = "gpg"

    # === COMPRESSION ===
    compression_type: Literal["none", "gzip", "bzip2", "xz", ""] = "none"

    # === CLEANUP ===
    cleanup_enabled: bool = True
    dumps_root: Path = Path("/opt/dumps")

    # === OBJECT STORE ===
    s3_bucket: str = ""
    s3_prefix: str = "backups"
    s3_options: str = ""
    s3_region: str = ""
    s3_endpoint_url: str = ""
    upload_backend: Literal["cli", "boto3"] = "cli"

    # === WEBHOOK ===
    webhook_url: str = ""
    webhook_timeout_s: float = 30.0
    webhook_retries: int = 2
    webhook_retry_delay_s: float = 5.0

    # === LOGGING ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: ByteSize = ByteSize(10 * 1024 * 1024)
    log_retention: int = 5

    # --- Validators ---

    @field_validator("postgres_host", "postgres_user", "postgres_db", "cron_time")
    @classmethod
    def validate_not_blank(cls, v: str, info) -> str:  # noqa: N805
        if not v.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v.strip()

    @field_validator("postgres_port")
    @classmethod
    def validate_port(cls, v: int) -> int:  # noqa: N805
        if not 0 < v < 65536:
            raise ValueError("postgres_port must be between 1 and 65535")
        return v

    @field_validator("title")
    @classmethod
    def strip_title_quotes(cls, v: str) -> str:  # noqa: N805
        """docker-compose list syntax keeps the quotes around TITLE="..."."""
        return v.strip().strip("\"'").strip()

    @field_validator("s3_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:  # noqa: N805
        return v.strip("/") or "backups"

    @field_validator("webhook_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("webhook_retries must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Cross-field consistency rules C-01 and C-02."""
        errors: list[str] = []

        # C-01
        if self.upload_backend == "boto3" and self.s3_options.strip():
            errors.append(
                "S3_OPTIONS are aws CLI flags and cannot be used with UPLOAD_BACKEND=boto3"
            )

        # C-02
        if not self.title:
            errors.append("TITLE must not be empty")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def s3_options_list(self) -> list[str]:
        """Split S3_OPTIONS the way a shell would."""
        return shlex.split(self.s3_options)

    @property
    def compression_enabled(self) -> bool:
        return self.compression_type not in ("none", "")

    @property
    def encryption_enabled(self) -> bool:
        return bool(self.encryption_key)

    @property
    def upload_enabled(self) -> bool:
        return bool(self.s3_bucket)

    @property
    def notification_enabled(self) -> bool:
        return bool(self.webhook_url)

    def describe(self) -> list[str]:
        """Human-readable summary of what a run will do. Never includes secrets."""
        lines = [
            f"Database: {self.postgres_user}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}",
            f"Schedule: {self.cron_time}",
            f"Dumps directory: {self.dumps_root / self.postgres_host}",
        ]
        if self.compression_enabled:
            lines.append(f"Compression: {self.compression_type}")
        else:
            lines.append("Compression: pg_dump custom format only")
        if self.encryption_enabled:
            lines.append(f"Encryption: {self.encryption_method}")
        else:
            lines.append("Encryption: disabled (ENCRYPTION_KEY not set)")
        if self.upload_enabled:
            lines.append(
                f"Upload: s3://{self.s3_bucket}/{self.s3_prefix}/{self.postgres_host}/ "
                f"via {self.upload_backend}"
            )
        else:
            lines.append("Upload: disabled, backups stay local")
        if self.notification_enabled:
            lines.append("Webhook: enabled")
        else:
            lines.append("Webhook: disabled (WEBHOOK_URL not set)")
        lines.append(
            "Cleanup: all local files"
            if self.cleanup_enabled
            else "Cleanup: intermediate files only, final artifact kept"
        )
        return lines


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing).

    Returns:
        Validated Settings instance.

    Raises:
        pydantic.ValidationError: If a required value is missing or invalid.
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
