"""
Artifact description — pure string and path construction.

    <tool>-v<version>-<OS>-<arch>.tar.gz
    <release_base_url>/v<version>/<archive>
    <cache_root>/conformance-<version>/<tool>

The cache path is keyed by version only: one cache root serves one
platform.
"""

from __future__ import annotations

from pathlib import Path

from conformance_runner.core.models.artifact import ArtifactDescriptor
from conformance_runner.core.models.config import RunnerConfig
from conformance_runner.core.models.platform import PlatformIdentity

ARCHIVE_SUFFIX = ".tar.gz"
CACHE_ENTRY_PREFIX = "conformance-"


def archive_filename(tool: str, version: str, platform: PlatformIdentity) -> str:
    return f"{tool}-v{version}-{platform.os}-{platform.arch}{ARCHIVE_SUFFIX}"


def download_url(base_url: str, version: str, filename: str) -> str:
    return f"{base_url.rstrip('/')}/v{version}/{filename}"


def cache_entry_name(version: str) -> str:
    return f"{CACHE_ENTRY_PREFIX}{version}"


def binary_name(tool: str, platform: PlatformIdentity) -> str:
    return f"{tool}.exe" if platform.is_windows else tool


def describe_artifact(
    config: RunnerConfig,
    platform: PlatformIdentity,
    cache_root: Path,
) -> ArtifactDescriptor:
    """Compute the full descriptor for the configured harness version.

    Args:
        config: Supplies tool name, pinned version and release base URL.
        platform: Resolved host identity.
        cache_root: Directory holding cache entries (already resolved).
    """
    filename = archive_filename(config.tool_name, config.version, platform)
    cache_path = cache_root / cache_entry_name(config.version)

    return ArtifactDescriptor(
        tool=config.tool_name,
        version=config.version,
        platform=platform,
        archive_filename=filename,
        url=download_url(config.release_base_url, config.version, filename),
        cache_root=cache_root,
        cache_path=cache_path,
        binary_path=cache_path / binary_name(config.tool_name, platform),
    )
