# tests/integration/conftest.py — v1
"""Fixtures for integration tests that run the real transform programs.

Tests are skipped when a program is not installed. pg_dump and the aws CLI
are never run: a hybrid runner fakes them and delegates everything else to
run_command().
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pgbackup.core.process import CommandResult, run_command


@pytest.fixture(autouse=True)
def gnupg_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Private GnuPG home so tests never touch the user's keyring or agent."""
    home = tmp_path / "gnupg"
    home.mkdir(mode=0o700)
    monkeypatch.setenv("GNUPGHOME", str(home))
    return home


@pytest.fixture
def sample_dump(tmp_path: Path) -> Path:
    """A file that looks like a pg_dump custom-format archive."""
    path = tmp_path / "2025-01-02T03:04:05+00:00.pgdump"
    path.write_bytes(b"PGDMP\x01\x0e\x00" + bytes(range(256)) * 64)
    return path


@pytest.fixture
def hybrid_runner():
    """Fake pg_dump/aws, real everything else."""
    calls: list[list[str]] = []

    def runner(argv, *, input_text=None, env=None, stdout_path=None, timeout=None):
        argv = [str(a) for a in argv]
        calls.append(argv)
        if argv[0] == "pg_dump":
            target = Path(argv[argv.index("--file") + 1])
            target.write_bytes(b"PGDMP integration dump" * 100)
            return CommandResult(args=tuple(argv), returncode=0)
        if argv[0] == "aws":
            return CommandResult(args=tuple(argv), returncode=0)
        return run_command(
            argv, input_text=input_text, env=env, stdout_path=stdout_path, timeout=timeout,
        )

    runner.calls = calls  # type: ignore[attr-defined]
    return runner
