"""
Run use case — fetch the harness, build the subject, run conformance.

This is the top-level orchestrator.  Steps run strictly in order and
the first failure stops the run:

    platform → artifact → cache entry → build → conformance tool

Failures in the first four steps come back as ``RunResult.error``
with the step name and an exit code.  A harness that runs to
completion is never an error, whatever it exits with: its exit code
is the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from conformance_runner.core.config.loader import resolve_path
from conformance_runner.core.errors import RunnerError
from conformance_runner.core.models.artifact import ArtifactDescriptor
from conformance_runner.core.models.config import RunnerConfig
from conformance_runner.core.models.platform import PlatformIdentity
from conformance_runner.core.services.artifact import describe_artifact
from conformance_runner.core.services.build import build_subject
from conformance_runner.core.services.conformance import execute_tool
from conformance_runner.core.services.download import download_file
from conformance_runner.core.services.platform_detect import detect_platform
from conformance_runner.core.services.subprocess_runner import CommandRunner, run_command
from conformance_runner.core.services.tool_cache import Fetcher, ensure_cache_entry

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of one conformance run."""

    exit_code: int = 0
    completed: bool = False         # harness ran to completion
    step: str | None = None         # failing step on early abort
    error: str | None = None
    descriptor: ArtifactDescriptor | None = None
    downloaded: bool = False
    build_ms: int = 0
    tool_ms: int = 0

    def to_dict(self) -> dict:
        result: dict = {
            "exit_code": self.exit_code,
            "completed": self.completed,
        }
        if self.error:
            result["step"] = self.step
            result["error"] = self.error
        if self.descriptor:
            result["artifact"] = self.descriptor.to_dict()
        result["downloaded"] = self.downloaded
        result["timing_ms"] = {"build": self.build_ms, "conformance": self.tool_ms}
        return result


def run_conformance(
    config: RunnerConfig,
    project_root: Path,
    args: Sequence[str] = (),
    *,
    cache_root: Path | None = None,
    platform: PlatformIdentity | None = None,
    fetch: Fetcher = download_file,
    runner: CommandRunner = run_command,
    notify: Callable[[str], None] | None = None,
) -> RunResult:
    """Run the harness against a freshly built subject.

    Args:
        config: Runner configuration.
        project_root: Directory the build and the harness run in.
        args: Pass-through arguments, placed before the fixed flags.
        cache_root: Override for ``config.cache_root``.
        platform: Pre-resolved platform (default: detect from host).
        fetch: Archive downloader, see ``ensure_cache_entry``.
        runner: Child-process runner for build and harness.
        notify: Optional callback for user-facing progress lines.
    """
    result = RunResult()
    root = cache_root or resolve_path(project_root, config.cache_root)

    try:
        identity = platform or detect_platform()
        result.descriptor = describe_artifact(config, identity, root)

        cached = ensure_cache_entry(
            result.descriptor,
            fetch=fetch,
            timeout=config.download_timeout,
            notify=notify,
        )
        result.downloaded = cached.downloaded

        built = build_subject(config, project_root, runner=runner)
        result.build_ms = built.elapsed_ms

        tool = execute_tool(result.descriptor, config, project_root, args, runner=runner)
    except RunnerError as e:
        logger.debug("Run aborted at step '%s'", e.step, exc_info=True)
        result.step = e.step
        result.error = str(e)
        result.exit_code = e.exit_code
        return result
    except OSError as e:
        # Cache root not creatable, scratch dir not writable, ...
        logger.debug("Run aborted on filesystem error", exc_info=True)
        result.step = "cache"
        result.error = f"Cache error: {e}"
        result.exit_code = 1
        return result

    result.completed = True
    result.exit_code = tool.returncode
    result.tool_ms = tool.elapsed_ms
    return result
