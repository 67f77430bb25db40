# tests/unit/restore/test_restorer.py — v1
"""Tests for restore/restorer.py with fake programs."""

from __future__ import annotations

from pathlib import Path

import pytest

from pgbackup.core.errors import RestoreError
from pgbackup.pipeline.stages.dump import ConnectionParams
from pgbackup.restore.restorer import BackupRestorer, RestorePlan


def _fake_decrypt(call):
    argv = call.argv
    if argv[0] == "gpg":
        source, target = Path(argv[-1]), Path(argv[argv.index("--output") + 1])
    else:
        source, target = Path(argv[argv.index("-in") + 1]), Path(argv[argv.index("-out") + 1])
    data = source.read_bytes()
    if call.input_text != "right\n":
        return 2
    target.write_bytes(data.removeprefix(b"ENC:"))
    return 0


def _fake_decompress(call):
    call.stdout_path.write_bytes(Path(call.argv[-1]).read_bytes().removeprefix(b"Z:"))
    return 0


@pytest.fixture
def restore_runner(fake_runner):
    for program in ("gpg", "openssl"):
        fake_runner.on(program, _fake_decrypt)
    for program in ("gunzip", "bunzip2", "unxz"):
        fake_runner.on(program, _fake_decompress)
    fake_runner.on("pg_restore", lambda call: 0)
    return fake_runner


class TestRestorePlan:
    @pytest.mark.parametrize(
        "name,encryption,compression",
        [
            ("x.pgdump", None, None),
            ("x.pgdump.gz", None, ".gz"),
            ("x.pgdump.gpg", "gpg", None),
            ("x.pgdump.bz2.enc", "openssl", ".bz2"),
            ("x.pgdump.xz.gpg", "gpg", ".xz"),
        ],
    )
    def test_for_path(self, name, encryption, compression):
        plan = RestorePlan.for_path(Path(name))
        assert plan.encryption == encryption
        assert plan.compression == compression

    def test_method_for_unsuffixed_file(self):
        plan = RestorePlan.for_path(Path("download.gz"), "openssl")
        assert plan.encryption == "openssl"
        assert plan.compression == ".gz"

    def test_suffix_wins_over_method(self):
        assert RestorePlan.for_path(Path("x.pgdump.gpg"), "openssl").encryption == "gpg"

    def test_unknown_method_rejected(self):
        with pytest.raises(ValueError, match="Unsupported"):
            BackupRestorer(method="rot13")


class TestExtract:
    def test_encrypted_and_compressed(self, tmp_path, restore_runner):
        artifact = tmp_path / "x.pgdump.gz.gpg"
        artifact.write_bytes(b"ENC:Z:PGDMP")
        output = tmp_path / "out" / "restored.pgdump"

        BackupRestorer(key="right", runner=restore_runner).extract(artifact, output)

        assert output.read_bytes() == b"PGDMP"
        assert artifact.read_bytes() == b"ENC:Z:PGDMP"
        assert restore_runner.programs() == ["gpg", "gunzip"]
        assert "right" not in " ".join(restore_runner.calls[0].argv)

    def test_plain_dump_copied(self, tmp_path, restore_runner):
        artifact = tmp_path / "x.pgdump"
        artifact.write_bytes(b"PGDMP")
        output = tmp_path / "copy.pgdump"
        BackupRestorer(runner=restore_runner).extract(artifact, output)
        assert output.read_bytes() == b"PGDMP"
        assert restore_runner.calls == []

    def test_wrong_key(self, tmp_path, restore_runner):
        artifact = tmp_path / "x.pgdump.enc"
        artifact.write_bytes(b"ENC:PGDMP")
        with pytest.raises(RestoreError, match="wrong key"):
            BackupRestorer(key="wrong", runner=restore_runner).extract(
                artifact, tmp_path / "o.pgdump"
            )
        assert artifact.read_bytes() == b"ENC:PGDMP"
        assert not (tmp_path / "o.pgdump").exists()

    def test_method_decrypts_unsuffixed_file(self, tmp_path, restore_runner):
        artifact = tmp_path / "nightly.bin"
        artifact.write_bytes(b"ENC:PGDMP")
        output = tmp_path / "o.pgdump"

        BackupRestorer(key="right", method="openssl", runner=restore_runner).extract(
            artifact, output
        )

        assert output.read_bytes() == b"PGDMP"
        assert restore_runner.programs() == ["openssl"]

    def test_missing_key(self, tmp_path, restore_runner):
        artifact = tmp_path / "x.pgdump.gpg"
        artifact.write_bytes(b"ENC:PGDMP")
        with pytest.raises(RestoreError, match="no encryption key"):
            BackupRestorer(runner=restore_runner).extract(artifact, tmp_path / "o")

    def test_not_a_pgdump(self, tmp_path, restore_runner):
        artifact = tmp_path / "x.pgdump"
        artifact.write_bytes(b"garbage")
        with pytest.raises(RestoreError, match="not a pg_dump"):
            BackupRestorer(runner=restore_runner).extract(artifact, tmp_path / "o")

    def test_missing_file(self, tmp_path, restore_runner):
        with pytest.raises(RestoreError, match="not found"):
            BackupRestorer(runner=restore_runner).extract(tmp_path / "nope.pgdump", tmp_path / "o")


class TestRestore:
    def test_pg_restore_invoked(self, tmp_path, restore_runner):
        artifact = tmp_path / "x.pgdump.xz"
        artifact.write_bytes(b"Z:PGDMP")
        conn = ConnectionParams(
            host="localhost", port=5432, user="postgres", password="pw", database="restored",
        )
        BackupRestorer(runner=restore_runner).restore(artifact, conn)

        call = restore_runner.calls_to("pg_restore")[0]
        assert call.argv[call.argv.index("-d") + 1] == "restored"
        assert "--clean" in call.argv and "--if-exists" in call.argv
        assert call.env == {"PGPASSWORD": "pw"}

    def test_pg_restore_failure(self, tmp_path, restore_runner):
        restore_runner.fail("pg_restore", 1)
        artifact = tmp_path / "x.pgdump"
        artifact.write_bytes(b"PGDMP")
        conn = ConnectionParams(host="h", port=5432, user="u", password="", database="d")
        with pytest.raises(RestoreError, match="pg_restore"):
            BackupRestorer(runner=restore_runner).restore(artifact, conn)
