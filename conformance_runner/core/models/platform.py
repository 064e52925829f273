"""
Platform identity — which release asset this host needs.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

ArtifactOS = Literal["Darwin", "Linux", "Windows"]


class PlatformIdentity(BaseModel):
    """OS and CPU architecture, spelled the way release assets are named.

    ``os`` is already translated to the artifact convention; ``arch``
    is the host-reported machine string, unchanged.
    """

    model_config = ConfigDict(frozen=True)

    os: ArtifactOS
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "Windows"

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"
