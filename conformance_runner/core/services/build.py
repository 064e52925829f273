"""
Subject build — run the project's build command before testing.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path

from conformance_runner.core.errors import BuildError
from conformance_runner.core.models.config import RunnerConfig
from conformance_runner.core.services.subprocess_runner import (
    CommandResult,
    CommandRunner,
    run_command,
)

logger = logging.getLogger(__name__)


def build_subject(
    config: RunnerConfig,
    project_root: Path,
    *,
    runner: CommandRunner = run_command,
) -> CommandResult:
    """Run ``config.build_command`` in ``project_root``.

    Raises:
        BuildError: Non-zero exit (carries the build tool's exit code),
            or the build tool could not be started (exit code 127).
    """
    cmd = list(config.build_command)
    logger.info("Building subject: %s", shlex.join(cmd))

    try:
        result = runner(cmd, cwd=project_root)
    except OSError as e:
        raise BuildError(f"Cannot run build command {cmd[0]!r}: {e}", exit_code=127) from e

    if not result.ok:
        raise BuildError(
            f"Build command exited with code {result.returncode}: {shlex.join(cmd)}",
            exit_code=result.returncode,
        )
    return result
