"""
Harness invocation — run the cached tool against the built subject.

    <binary> <user args...> --conf <config> --mode <mode> -- <subject>

User arguments always come first so they can never displace the
fixed flags or the subject path after ``--``.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Sequence

from conformance_runner.core.config.loader import resolve_path
from conformance_runner.core.errors import ToolExecutionError
from conformance_runner.core.models.artifact import ArtifactDescriptor
from conformance_runner.core.models.config import RunnerConfig
from conformance_runner.core.services.subprocess_runner import (
    CommandResult,
    CommandRunner,
    run_command,
)

logger = logging.getLogger(__name__)


def subject_path(config: RunnerConfig, project_root: Path) -> Path:
    """Where the build deposits the subject binary."""
    return resolve_path(project_root, config.subject_binary)


def tool_command(
    descriptor: ArtifactDescriptor,
    config: RunnerConfig,
    user_args: Sequence[str] = (),
) -> list[str]:
    """Assemble the harness argv.

    ``--conf`` and the subject path are passed exactly as configured;
    the harness runs with the project root as cwd.
    """
    return [
        str(descriptor.binary_path),
        *user_args,
        "--conf", config.conformance_config,
        "--mode", config.mode,
        "--",
        config.subject_binary,
    ]


def execute_tool(
    descriptor: ArtifactDescriptor,
    config: RunnerConfig,
    project_root: Path,
    user_args: Sequence[str] = (),
    *,
    runner: CommandRunner = run_command,
) -> CommandResult:
    """Run the harness and return its result, whatever the exit code.

    Raises:
        ToolExecutionError: The harness binary could not be started.
    """
    cmd = tool_command(descriptor, config, user_args)
    logger.info("Running conformance: %s", shlex.join(cmd))

    try:
        result = runner(cmd, cwd=project_root)
    except OSError as e:
        raise ToolExecutionError(f"Cannot run {descriptor.binary_path}: {e}") from e

    if not result.ok:
        logger.info("Conformance tool exited with code %d", result.returncode)
    return result
