"""
Resolve use case — show which harness archive this host would use.

No downloads, no builds: platform resolution, artifact description
and a cache presence check.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from conformance_runner.core.config.loader import resolve_path
from conformance_runner.core.errors import UnsupportedPlatformError
from conformance_runner.core.models.artifact import ArtifactDescriptor
from conformance_runner.core.models.config import RunnerConfig
from conformance_runner.core.services.artifact import describe_artifact
from conformance_runner.core.services.conformance import subject_path
from conformance_runner.core.services.platform_detect import detect_platform, resolve_platform


@dataclass
class ResolveResult:
    """Artifact identity plus whether it is already cached."""

    descriptor: ArtifactDescriptor | None = None
    cached: bool = False
    subject: Path | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error or self.descriptor is None:
            return {"error": self.error or "No artifact resolved"}
        return {
            **self.descriptor.to_dict(),
            "cached": self.cached,
            "subject_binary": str(self.subject) if self.subject else None,
        }


def resolve_artifact(
    config: RunnerConfig,
    project_root: Path,
    *,
    cache_root: Path | None = None,
    os_report: str | None = None,
    arch_report: str | None = None,
) -> ResolveResult:
    """Describe the harness artifact for the host or an explicit platform.

    When only one of ``os_report``/``arch_report`` is given, the other
    is taken from the host.
    """
    result = ResolveResult()
    root = cache_root or resolve_path(project_root, config.cache_root)

    try:
        if os_report is None and arch_report is None:
            identity = detect_platform()
        else:
            host = None
            if os_report is None or arch_report is None:
                host = detect_platform()
            identity = resolve_platform(
                os_report if os_report is not None else host.os,
                arch_report if arch_report is not None else host.arch,
            )
    except UnsupportedPlatformError as e:
        result.error = str(e)
        return result

    result.descriptor = describe_artifact(config, identity, root)
    result.cached = result.descriptor.cache_path.exists()
    result.subject = subject_path(config, project_root)
    return result
