# tests/unit/storage/test_cli_uploader.py — v1
"""Tests for storage/cli_uploader.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from pgbackup.core.errors import UploadError
from pgbackup.storage.cli_uploader import CliUploader


class TestCliUploader:
    def test_command_with_options_appended_verbatim(self, fake_runner):
        uploader = CliUploader(
            bucket="bkt",
            extra_options=["--storage-class", "GLACIER", "--sse"],
            runner=fake_runner,
        )
        uploader.upload(Path("/d/h/x.pgdump"), "backups/h/x.pgdump")
        assert fake_runner.calls[0].argv == [
            "aws", "s3", "cp", "/d/h/x.pgdump", "s3://bkt/backups/h/x.pgdump",
            "--storage-class", "GLACIER", "--sse",
        ]

    def test_region_and_endpoint(self):
        uploader = CliUploader(bucket="b", region="eu-west-1", endpoint_url="http://minio:9000")
        argv = uploader.build_command(Path("/f"), "k")
        assert argv[5:] == ["--region", "eu-west-1", "--endpoint-url", "http://minio:9000"]

    def test_failure_raises_upload_error(self, fake_runner):
        fake_runner.fail("aws", 1)
        uploader = CliUploader(bucket="bkt", runner=fake_runner)
        with pytest.raises(UploadError, match="status 1"):
            uploader.upload(Path("/f"), "k")
