"""
Subprocess runner — the single place child processes are started.

Children inherit our stdin/stdout/stderr: the subject build and the
harness talk to the user directly and their output is never captured
or rewritten.

A child killed by signal N reports ``128 + N``, the status a shell
would give it, so the code can be passed to ``sys.exit`` unchanged.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

_SIGNAL_EXIT_BASE = 128


@dataclass
class CommandResult:
    """Exit status and wall time of one child process."""

    cmd: list[str]
    returncode: int
    elapsed_ms: int = 0
    signal: int | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[..., CommandResult]


def exit_status(returncode: int) -> int:
    """Map a ``subprocess`` return code to a shell-style exit status."""
    if returncode < 0:
        return _SIGNAL_EXIT_BASE - returncode
    return returncode


def run_command(cmd: list[str], *, cwd: Path | None = None) -> CommandResult:
    """Run ``cmd`` to completion with inherited stdio.

    Args:
        cmd: Command list for ``subprocess.run()``.
        cwd: Working directory for the command.

    Raises:
        FileNotFoundError: The executable does not exist.
        PermissionError: The executable cannot be run.
    """
    logger.debug("Executing: %s (cwd=%s)", shlex.join(cmd), cwd)
    start = time.monotonic()
    completed = subprocess.run(cmd, cwd=cwd, check=False)
    elapsed_ms = int((time.monotonic() - start) * 1000)

    signum = -completed.returncode if completed.returncode < 0 else None
    if signum is not None:
        logger.warning("%s killed by signal %d", cmd[0], signum)
    returncode = exit_status(completed.returncode)

    logger.debug("Exit %d after %dms: %s", returncode, elapsed_ms, cmd[0])
    return CommandResult(
        cmd=list(cmd),
        returncode=returncode,
        elapsed_ms=elapsed_ms,
        signal=signum,
    )
