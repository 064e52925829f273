"""
Runner error taxonomy.

Every fatal condition in the run flow is one of these.  Each error
knows which step it belongs to and which exit code the process
should terminate with.
"""

from __future__ import annotations


class RunnerError(Exception):
    """Base class for fatal conformance-run failures."""

    step: str = "runner"
    exit_code: int = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UnsupportedPlatformError(RunnerError):
    """Host OS is not one the harness is published for."""

    step = "platform"


class DownloadError(RunnerError):
    """Archive could not be fetched."""

    step = "download"


class ExtractionError(RunnerError):
    """Archive is corrupt, incomplete, or missing the tool binary."""

    step = "extract"


class BuildError(RunnerError):
    """Subject build command failed or could not be started."""

    step = "build"


class ToolExecutionError(RunnerError):
    """Conformance tool binary could not be launched."""

    step = "conformance"
    exit_code = 127
