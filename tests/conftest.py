# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides settings factories, a fake external-program runner and temp dump
directories. No network, no database: external programs are simulated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Sequence

import pytest

from pgbackup.config.settings import Settings
from pgbackup.core.process import CommandResult
from pgbackup.logging.context import clear_context

REQUIRED = {
    "postgres_host": "db.internal",
    "postgres_port": 5432,
    "postgres_user": "postgres",
    "postgres_password": "pg-secret",
    "postgres_db": "shop",
    "title": "Nightly Backup",
    "cron_time": "0 */12 * * *",
}


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch):
    """Keep the developer's environment out of Settings()."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)
    yield
    clear_context()


@pytest.fixture
def tmp_dumps_root(tmp_path: Path) -> Path:
    """Temporary dumps root directory."""
    root = tmp_path / "dumps"
    root.mkdir()
    return root


@pytest.fixture
def make_settings(tmp_dumps_root: Path) -> Callable[..., Settings]:
    """Factory for valid Settings with overrides."""

    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {**REQUIRED, "dumps_root": tmp_dumps_root}
        values.update(overrides)
        return Settings(_env_file=None, **values)  # type: ignore[arg-type]

    return _make


# === FAKE EXTERNAL PROGRAMS ===


@dataclass
class Call:
    argv: list[str]
    input_text: str | None = None
    env: dict[str, str] | None = None
    stdout_path: Path | None = None

    @property
    def program(self) -> str:
        return self.argv[0]


Handler = Callable[[Call], int]


@dataclass
class FakeRunner:
    """Stands in for run_command(); simulates the file effects of each program.

    Handlers return the exit status. Override one with ``runner.on(program, fn)``
    or force a status with ``runner.fail(program, status)``.
    """

    calls: list[Call] = field(default_factory=list)
    handlers: dict[str, Handler] = field(default_factory=dict)

    def __post_init__(self) -> None:
        defaults: dict[str, Handler] = {
            "pg_dump": _fake_pg_dump,
            "gzip": _fake_compressor(".gz"),
            "bzip2": _fake_compressor(".bz2"),
            "xz": _fake_compressor(".xz"),
            "gpg": _fake_encryptor,
            "openssl": _fake_encryptor,
            "aws": lambda call: 0,
        }
        for program, handler in defaults.items():
            self.handlers.setdefault(program, handler)

    def on(self, program: str, handler: Handler) -> None:
        self.handlers[program] = handler

    def fail(self, program: str, status: int = 1) -> None:
        self.handlers[program] = lambda call: status

    def programs(self) -> list[str]:
        return [c.program for c in self.calls]

    def calls_to(self, program: str) -> list[Call]:
        return [c for c in self.calls if c.program == program]

    def __call__(
        self,
        argv: Sequence[str],
        *,
        input_text: str | None = None,
        env: Mapping[str, str] | None = None,
        stdout_path: Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        call = Call(
            argv=[str(a) for a in argv],
            input_text=input_text,
            env=dict(env) if env is not None else None,
            stdout_path=stdout_path,
        )
        self.calls.append(call)
        handler = self.handlers.get(call.program, lambda c: 127)
        status = handler(call)
        return CommandResult(args=tuple(call.argv), returncode=status)


def _arg_after(argv: list[str], flag: str) -> str:
    return argv[argv.index(flag) + 1]


def _fake_pg_dump(call: Call) -> int:
    Path(_arg_after(call.argv, "--file")).write_bytes(b"PGDMP fake custom dump")
    return 0


def _fake_compressor(suffix: str) -> Handler:
    def handler(call: Call) -> int:
        source = Path(call.argv[-1])
        source.rename(source.with_name(source.name + suffix))
        return 0

    return handler


def _fake_encryptor(call: Call) -> int:
    if call.program == "gpg":
        source, target = Path(call.argv[-1]), Path(_arg_after(call.argv, "--output"))
    else:
        source, target = Path(_arg_after(call.argv, "-in")), Path(_arg_after(call.argv, "-out"))
    target.write_bytes(b"ENC:" + source.read_bytes())
    return 0


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
