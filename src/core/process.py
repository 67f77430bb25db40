# src/core/process.py — v1
"""External program execution.

Every collaborator (pg_dump, gzip, gpg, aws, ...) is run through
run_command(): argv only, never a shell, secrets only on stdin. A nonzero
exit status is returned, not raised. Like a shell, a missing binary is
reported as exit status 127 and one that cannot be executed as 126.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol, Sequence

logger = logging.getLogger(__name__)

COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Result of an external program execution."""

    args: tuple[str, ...]
    returncode: int
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    def __call__(
        self,
        argv: Sequence[str],
        *,
        input_text: str | None = None,
        env: Mapping[str, str] | None = None,
        stdout_path: Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult: ...


def run_command(
    argv: Sequence[str],
    *,
    input_text: str | None = None,
    env: Mapping[str, str] | None = None,
    stdout_path: Path | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run a program synchronously and wait for it to exit.

    Args:
        argv: Program and arguments.
        input_text: Text fed to the program's stdin (passphrases go here).
        env: Extra environment variables merged over os.environ.
        stdout_path: If set, the program's stdout is written to this file.
        timeout: Kill the program after this many seconds.

    Returns:
        CommandResult with the exit status and captured stderr.
    """
    args = tuple(str(a) for a in argv)
    final_env = None if env is None else {**os.environ, **env}
    logger.debug("Running: %s", " ".join(args))

    try:
        if stdout_path is not None:
            with open(stdout_path, "wb") as out:
                proc = subprocess.run(
                    args,
                    input=input_text.encode("utf-8") if input_text is not None else None,
                    stdout=out,
                    stderr=subprocess.PIPE,
                    env=final_env,
                    timeout=timeout,
                    check=False,
                )
        else:
            proc = subprocess.run(
                args,
                input=input_text.encode("utf-8") if input_text is not None else None,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                env=final_env,
                timeout=timeout,
                check=False,
            )
    except FileNotFoundError:
        logger.error("Program not found: %s", args[0])
        return CommandResult(args=args, returncode=COMMAND_NOT_FOUND, stderr="command not found")
    except OSError as e:
        logger.error("Cannot execute %s: %s", args[0], e)
        return CommandResult(args=args, returncode=COMMAND_NOT_EXECUTABLE, stderr=str(e))
    except subprocess.TimeoutExpired:
        logger.error("%s timed out after %ss", args[0], timeout)
        return CommandResult(args=args, returncode=-1, stderr="timed out")

    stderr = proc.stderr.decode("utf-8", errors="replace").strip() if proc.stderr else ""
    if proc.returncode != 0 and stderr:
        logger.debug("%s stderr: %s", args[0], stderr)
    return CommandResult(args=args, returncode=proc.returncode, stderr=stderr)
