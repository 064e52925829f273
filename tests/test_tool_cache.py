"""
Tests for the harness cache — idempotence, atomic placement, housekeeping.
"""

from pathlib import Path

import pytest

from conformance_runner.core.errors import DownloadError, ExtractionError
from conformance_runner.core.models.config import RunnerConfig
from conformance_runner.core.models.platform import PlatformIdentity
from conformance_runner.core.services.artifact import describe_artifact
from conformance_runner.core.services.tool_cache import (
    SCRATCH_PREFIX,
    cache_status,
    clear_cache,
    ensure_cache_entry,
    ensure_directory,
)


@pytest.fixture
def descriptor(config: RunnerConfig, linux_x86: PlatformIdentity, cache_root: Path):
    return describe_artifact(config, linux_x86, cache_root)


def _scratch_dirs(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return [p for p in root.iterdir() if p.name.startswith(SCRATCH_PREFIX)]


class TestEnsureDirectory:
    def test_creates_missing(self, tmp_path: Path):
        target = tmp_path / "a" / "b"
        assert ensure_directory(target) == target
        assert target.is_dir()

    def test_existing_is_success(self, tmp_path: Path):
        ensure_directory(tmp_path)
        ensure_directory(tmp_path)
        assert tmp_path.is_dir()

    def test_existing_file_is_error(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(FileExistsError):
            ensure_directory(blocker)


class TestEnsureCacheEntry:
    def test_first_call_downloads(self, descriptor, fake_fetch):
        result = ensure_cache_entry(descriptor, fetch=fake_fetch)
        assert result.downloaded is True
        assert fake_fetch.call_count == 1
        assert fake_fetch.calls[0][0] == descriptor.url
        assert result.path == descriptor.cache_path
        assert descriptor.binary_path.is_file()

    def test_second_call_is_cache_hit(self, descriptor, fake_fetch):
        first = ensure_cache_entry(descriptor, fetch=fake_fetch)
        second = ensure_cache_entry(descriptor, fetch=fake_fetch)

        assert fake_fetch.call_count == 1
        assert second.downloaded is False
        assert first.path == second.path
        assert any(second.path.iterdir())

    def test_existing_entry_is_not_revalidated(self, descriptor, fake_fetch):
        # Presence alone counts, even for an empty directory.
        descriptor.cache_path.mkdir(parents=True)
        result = ensure_cache_entry(descriptor, fetch=fake_fetch)
        assert fake_fetch.call_count == 0
        assert result.downloaded is False

    def test_binary_is_executable(self, descriptor, tmp_path, tarball_factory, fetcher_factory):
        archive = tarball_factory(tmp_path / "noexec.tar.gz", {"connectconformance": b"x"}, mode=0o644)
        ensure_cache_entry(descriptor, fetch=fetcher_factory(source=archive))
        assert descriptor.binary_path.stat().st_mode & 0o111

    def test_scratch_removed_after_success(self, descriptor, fake_fetch):
        ensure_cache_entry(descriptor, fetch=fake_fetch)
        assert _scratch_dirs(descriptor.cache_root) == []

    def test_notify_called_on_download_only(self, descriptor, fake_fetch):
        messages: list[str] = []
        ensure_cache_entry(descriptor, fetch=fake_fetch, notify=messages.append)
        ensure_cache_entry(descriptor, fetch=fake_fetch, notify=messages.append)
        assert messages == [f"Downloading {descriptor.url}"]

    def test_timeout_forwarded(self, descriptor, harness_tarball):
        seen = {}

        def _fetch(url, dest, *, timeout):
            seen["timeout"] = timeout
            dest.write_bytes(harness_tarball.read_bytes())
            return 0

        ensure_cache_entry(descriptor, fetch=_fetch, timeout=9)
        assert seen["timeout"] == 9

    def test_wrapped_top_level_directory(self, descriptor, tmp_path, tarball_factory, fetcher_factory):
        archive = tarball_factory(
            tmp_path / "wrapped.tar.gz",
            {"connectconformance-v1.0.4/connectconformance": b"#!/bin/sh\n"},
        )
        ensure_cache_entry(descriptor, fetch=fetcher_factory(source=archive))
        assert descriptor.binary_path.is_file()


class TestEnsureCacheEntryFailures:
    def test_download_failure_leaves_no_entry(self, descriptor, fetcher_factory):
        fetch = fetcher_factory(error=DownloadError("GET returned HTTP 404"))
        with pytest.raises(DownloadError):
            ensure_cache_entry(descriptor, fetch=fetch)
        assert not descriptor.cache_path.exists()
        assert _scratch_dirs(descriptor.cache_root) == []

    def test_corrupt_archive_leaves_no_entry(self, descriptor, tmp_path, fetcher_factory):
        bad = tmp_path / "bad.tar.gz"
        bad.write_bytes(b"garbage")
        with pytest.raises(ExtractionError):
            ensure_cache_entry(descriptor, fetch=fetcher_factory(source=bad))
        assert not descriptor.cache_path.exists()

    def test_interrupted_extraction_leaves_no_entry(self, descriptor, fake_fetch):
        def _half_extract(archive: Path, dest: Path) -> None:
            dest.mkdir(parents=True)
            (dest / "connectconformance").write_bytes(b"partial")
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            ensure_cache_entry(descriptor, fetch=fake_fetch, extract=_half_extract)
        assert not descriptor.cache_path.exists()
        assert _scratch_dirs(descriptor.cache_root) == []

    def test_missing_binary_leaves_no_entry(self, descriptor, tmp_path, tarball_factory, fetcher_factory):
        archive = tarball_factory(tmp_path / "empty.tar.gz", {"README.md": b"hello"})
        with pytest.raises(ExtractionError, match="not found in release archive"):
            ensure_cache_entry(descriptor, fetch=fetcher_factory(source=archive))
        assert not descriptor.cache_path.exists()

    def test_retry_after_failure_downloads_again(self, descriptor, fake_fetch, fetcher_factory):
        with pytest.raises(DownloadError):
            ensure_cache_entry(descriptor, fetch=fetcher_factory(error=DownloadError("offline")))
        result = ensure_cache_entry(descriptor, fetch=fake_fetch)
        assert result.downloaded is True
        assert descriptor.binary_path.is_file()


class TestCacheHousekeeping:
    def test_status_empty(self, tmp_path: Path):
        result = cache_status(tmp_path / "missing")
        assert result["entries"] == {}
        assert result["total_size_mb"] == 0

    def test_status_lists_entries(self, descriptor, fake_fetch):
        ensure_cache_entry(descriptor, fetch=fake_fetch)
        (descriptor.cache_root / f"{SCRATCH_PREFIX}leftover").mkdir()
        result = cache_status(descriptor.cache_root)
        assert list(result["entries"]) == ["conformance-1.0.4"]
        assert result["entries"]["conformance-1.0.4"]["files"] == 2

    def test_clear_one_version(self, descriptor, fake_fetch):
        ensure_cache_entry(descriptor, fetch=fake_fetch)
        (descriptor.cache_root / "conformance-1.0.3").mkdir()
        result = clear_cache(descriptor.cache_root, version="v1.0.4")
        assert result["cleared"] == ["conformance-1.0.4"]
        assert not descriptor.cache_path.exists()
        assert (descriptor.cache_root / "conformance-1.0.3").exists()

    def test_clear_all(self, descriptor, fake_fetch):
        ensure_cache_entry(descriptor, fetch=fake_fetch)
        (descriptor.cache_root / f"{SCRATCH_PREFIX}leftover").mkdir()
        (descriptor.cache_root / "unrelated.txt").write_text("keep")
        result = clear_cache(descriptor.cache_root)
        assert sorted(result["cleared"]) == sorted(["conformance-1.0.4", f"{SCRATCH_PREFIX}leftover"])
        assert (descriptor.cache_root / "unrelated.txt").exists()

    def test_clear_absent_is_ok(self, tmp_path: Path):
        assert clear_cache(tmp_path / "nothing", version="1.0.4") == {"ok": True, "cleared": []}
