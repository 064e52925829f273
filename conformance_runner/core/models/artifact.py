"""
Artifact descriptor — the computed identity of one harness download.

Fully determined by the platform, the pinned version and the cache
root.  Nothing here is negotiated or discovered at runtime.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from conformance_runner.core.models.platform import PlatformIdentity


class ArtifactDescriptor(BaseModel):
    """Filename, URL and local paths for one version/platform pair."""

    model_config = ConfigDict(frozen=True)

    tool: str
    version: str
    platform: PlatformIdentity
    archive_filename: str
    url: str
    cache_root: Path
    cache_path: Path        # extracted tool directory (the cache entry)
    binary_path: Path       # executable inside the cache entry

    def to_dict(self) -> dict:
        return {
            "tool": self.tool,
            "version": self.version,
            "os": self.platform.os,
            "arch": self.platform.arch,
            "archive_filename": self.archive_filename,
            "url": self.url,
            "cache_root": str(self.cache_root),
            "cache_path": str(self.cache_path),
            "binary_path": str(self.binary_path),
        }
