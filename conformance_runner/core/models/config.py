"""
Runner configuration model — loaded from conformance-runner.yml.

Every field has a default, so an absent config file yields the
pinned harness version and the standard cargo subject layout.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

DEFAULT_RELEASE_BASE_URL = "https://github.com/connectrpc/conformance/releases/download"


class RunnerConfig(BaseModel):
    """How to fetch the harness and how to build and address the subject.

    Relative paths (``cache_root``, ``conformance_config``,
    ``subject_binary``) are interpreted against the project root.
    """

    # Harness artifact
    tool_name: str = "connectconformance"
    version: str = "1.0.4"
    release_base_url: str = DEFAULT_RELEASE_BASE_URL
    download_timeout: int = 60

    # Local layout
    cache_root: str = ".work"
    conformance_config: str = "conformance.yaml"
    mode: str = "client"

    # Subject under test
    build_command: list[str] = Field(default_factory=lambda: ["cargo", "build"])
    subject_binary: str = "target/debug/connect-rpc-conformance"

    @field_validator("version", mode="before")
    @classmethod
    def _strip_v_prefix(cls, value: object) -> str:
        # Tags carry the "v"; the pinned value must not, or it doubles up.
        # YAML reads an unquoted 1.1 as a float.
        if isinstance(value, (int, float)):
            value = str(value)
        if not isinstance(value, str):
            raise ValueError("version must be a string")
        value = value.strip()
        if not value:
            raise ValueError("version must not be empty")
        return value[1:] if value.startswith("v") else value

    @field_validator("release_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("build_command")
    @classmethod
    def _non_empty_command(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("build_command must name at least the executable")
        return value

    @field_validator("download_timeout")
    @classmethod
    def _positive_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("download_timeout must be positive")
        return value
