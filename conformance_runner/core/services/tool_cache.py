"""
Harness cache — one extracted tool directory per pinned version.

Presence of ``<cache_root>/conformance-<version>`` is the only signal
that a version is installed.  Entries are never revalidated and never
evicted automatically; ``clear_cache`` is the explicit way out.

Population happens in a scratch directory next to the entry and ends
with a single rename, so a failed or interrupted run never leaves a
half-populated entry behind.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from conformance_runner.core.errors import ExtractionError
from conformance_runner.core.models.artifact import ArtifactDescriptor
from conformance_runner.core.services.artifact import CACHE_ENTRY_PREFIX
from conformance_runner.core.services.download import download_file, extract_tarball

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = ".download-"

Fetcher = Callable[..., int]
Extractor = Callable[[Path, Path], None]


@dataclass
class CacheResult:
    """Outcome of ``ensure_cache_entry``."""

    path: Path
    binary_path: Path
    downloaded: bool = False


def ensure_directory(path: Path) -> Path:
    """Create ``path`` (and parents) unless it is already a directory.

    An existing directory is success.  An existing non-directory is
    not, and surfaces as ``FileExistsError``.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def ensure_cache_entry(
    descriptor: ArtifactDescriptor,
    *,
    fetch: Fetcher = download_file,
    extract: Extractor = extract_tarball,
    timeout: int = 60,
    notify: Callable[[str], None] | None = None,
) -> CacheResult:
    """Make sure the harness for ``descriptor`` is extracted in the cache.

    Args:
        descriptor: Which archive to fetch and where it lives.
        fetch: ``fetch(url, dest, timeout=...)``, writes the archive.
        extract: ``extract(archive, dest_dir)``, unpacks it.
        timeout: Download timeout in seconds.
        notify: Optional callback for user-facing progress lines.

    Raises:
        DownloadError: From ``fetch``.
        ExtractionError: From ``extract``, or the binary is missing.
    """
    if descriptor.cache_path.exists():
        logger.debug("Cache hit: %s", descriptor.cache_path)
        return CacheResult(
            path=descriptor.cache_path,
            binary_path=descriptor.binary_path,
        )

    ensure_directory(descriptor.cache_root)

    if notify:
        notify(f"Downloading {descriptor.url}")
    logger.info("Cache miss for %s v%s", descriptor.tool, descriptor.version)

    scratch = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX, dir=descriptor.cache_root))
    try:
        archive = scratch / descriptor.archive_filename
        fetch(descriptor.url, archive, timeout=timeout)

        extracted = scratch / "extracted"
        extract(archive, extracted)

        entry_dir = _locate_entry_dir(extracted, descriptor.binary_path.name)
        _make_executable(entry_dir / descriptor.binary_path.name)

        # Last step: the entry becomes visible atomically or not at all.
        try:
            entry_dir.rename(descriptor.cache_path)
        except OSError as e:
            if descriptor.cache_path.exists():
                logger.warning(
                    "Cache entry %s appeared during download; keeping the existing one",
                    descriptor.cache_path,
                )
            else:
                raise ExtractionError(
                    f"Cannot move extracted tool into {descriptor.cache_path}: {e}"
                ) from e
    finally:
        shutil.rmtree(scratch, ignore_errors=True)

    logger.info("Cached %s at %s", descriptor.tool, descriptor.cache_path)
    return CacheResult(
        path=descriptor.cache_path,
        binary_path=descriptor.binary_path,
        downloaded=True,
    )


def cache_status(cache_root: Path) -> dict:
    """Return summary of cached harness versions and their sizes.

    Returns::

        {
            "cache_root": "/path/to/.work",
            "entries": {"conformance-1.0.4": {"files": 1, "size_mb": 23.4}},
            "total_size_mb": 23.4,
        }
    """
    entries: dict[str, dict] = {}
    total_bytes = 0

    if cache_root.is_dir():
        for item in sorted(cache_root.iterdir()):
            if not item.is_dir() or not item.name.startswith(CACHE_ENTRY_PREFIX):
                continue
            files = [f for f in item.rglob("*") if f.is_file()]
            size = sum(f.stat().st_size for f in files)
            entries[item.name] = {
                "files": len(files),
                "size_mb": round(size / (1024 * 1024), 1),
            }
            total_bytes += size

    return {
        "cache_root": str(cache_root),
        "entries": entries,
        "total_size_mb": round(total_bytes / (1024 * 1024), 1),
    }


def clear_cache(cache_root: Path, version: str | None = None) -> dict:
    """Remove one cached version, or every entry and leftover scratch dir.

    Returns:
        ``{"ok": True, "cleared": ["conformance-1.0.4"]}``
    """
    cleared: list[str] = []

    if not cache_root.is_dir():
        return {"ok": True, "cleared": cleared}

    if version:
        targets = [cache_root / f"{CACHE_ENTRY_PREFIX}{version.removeprefix('v')}"]
    else:
        targets = [
            p for p in sorted(cache_root.iterdir())
            if p.name.startswith((CACHE_ENTRY_PREFIX, SCRATCH_PREFIX))
        ]

    for target in targets:
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()
        else:
            continue
        cleared.append(target.name)
        logger.info("Removed %s", target)

    return {"ok": True, "cleared": cleared}


# ── Private helpers ───────────────────────────────────────

def _locate_entry_dir(extracted: Path, binary: str) -> Path:
    """Find the directory that directly holds the tool binary.

    Release archives put the binary at the top level; an archive that
    wraps everything in a single directory is accepted too.
    """
    if (extracted / binary).is_file():
        return extracted

    children = [p for p in extracted.iterdir()] if extracted.is_dir() else []
    if len(children) == 1 and children[0].is_dir() and (children[0] / binary).is_file():
        return children[0]

    available = sorted(p.name for p in extracted.rglob("*") if p.is_file())[:10]
    raise ExtractionError(
        f"Binary '{binary}' not found in release archive (found: {', '.join(available) or 'nothing'})"
    )


def _make_executable(path: Path) -> None:
    if os.name == "nt":
        return
    mode = path.stat().st_mode
    if mode & 0o111 != 0o111:
        os.chmod(path, mode | 0o755)
