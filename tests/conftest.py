"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import io
import shutil
import tarfile
from pathlib import Path

import pytest

from conformance_runner.core.models.config import RunnerConfig
from conformance_runner.core.models.platform import PlatformIdentity
from conformance_runner.core.services.subprocess_runner import CommandResult


def make_tarball(dest: Path, members: dict[str, bytes], *, mode: int = 0o755) -> Path:
    """Write a gzip tarball with the given file members."""
    with tarfile.open(dest, "w:gz") as tf:
        for name, data in members.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            info.mode = mode
            tf.addfile(info, io.BytesIO(data))
    return dest


class FakeFetcher:
    """Stands in for ``download_file``: copies a local archive, counts calls."""

    def __init__(self, source: Path | None = None, error: Exception | None = None):
        self.source = source
        self.error = error
        self.calls: list[tuple[str, Path]] = []

    def __call__(self, url: str, dest: Path, *, timeout: int = 60) -> int:
        self.calls.append((url, dest))
        if self.error is not None:
            raise self.error
        assert self.source is not None
        shutil.copyfile(self.source, dest)
        return dest.stat().st_size

    @property
    def call_count(self) -> int:
        return len(self.calls)


class RecordingRunner:
    """Stands in for ``run_command``: records argv, returns canned exit codes."""

    def __init__(self):
        self.calls: list[tuple[list[str], Path | None]] = []
        self._codes: dict[str, int] = {}
        self._errors: dict[str, Exception] = {}

    def set_returncode(self, executable: str, code: int) -> None:
        self._codes[executable] = code

    def set_error(self, executable: str, error: Exception) -> None:
        self._errors[executable] = error

    def __call__(self, cmd: list[str], *, cwd: Path | None = None, **kwargs) -> CommandResult:
        self.calls.append((list(cmd), cwd))
        if cmd[0] in self._errors:
            raise self._errors[cmd[0]]
        return CommandResult(cmd=list(cmd), returncode=self._codes.get(cmd[0], 0))

    @property
    def commands(self) -> list[list[str]]:
        return [c for c, _ in self.calls]


@pytest.fixture
def linux_x86() -> PlatformIdentity:
    return PlatformIdentity(os="Linux", arch="x86_64")


@pytest.fixture
def config() -> RunnerConfig:
    return RunnerConfig()


@pytest.fixture
def harness_tarball(tmp_path: Path) -> Path:
    """A release-shaped archive: the binary at the top level."""
    return make_tarball(
        tmp_path / "connectconformance-v1.0.4-Linux-x86_64.tar.gz",
        {"connectconformance": b"#!/bin/sh\nexit 0\n", "LICENSE": b"Apache-2.0\n"},
    )


@pytest.fixture
def fake_fetch(harness_tarball: Path) -> FakeFetcher:
    return FakeFetcher(source=harness_tarball)


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """A not-yet-created cache root inside the test's temp dir."""
    return tmp_path / "project" / ".work"


@pytest.fixture
def tarball_factory():
    """``make_tarball`` as a fixture, for tests that need custom archives."""
    return make_tarball


@pytest.fixture
def fetcher_factory():
    """Build ``FakeFetcher`` instances with a custom source or error."""
    return FakeFetcher
