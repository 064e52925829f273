"""
Download and extraction — fetch a release archive and unpack it.

File download with progress logging, and gzip tarball extraction.
No checksum step: release assets are consumed as published.
"""

from __future__ import annotations

import logging
import tarfile
import urllib.error
import urllib.request
import zlib
from pathlib import Path

from conformance_runner import __version__
from conformance_runner.core.errors import DownloadError, ExtractionError

logger = logging.getLogger(__name__)

_USER_AGENT = f"conformance-runner/{__version__}"
_CHUNK_SIZE = 8192


def _fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


def download_file(url: str, dest: Path, *, timeout: int = 60) -> int:
    """Download ``url`` to ``dest``, following redirects.

    GitHub release URLs redirect to a CDN; urllib follows those.

    Returns:
        Number of bytes written.

    Raises:
        DownloadError: Network failure, non-2xx status, or write error.
            A partial ``dest`` is removed before raising.
    """
    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})

    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = resp.getcode()
            if status is not None and not 200 <= status < 300:
                raise DownloadError(f"GET {url} returned HTTP {status}")

            total = int(resp.headers.get("Content-Length", 0) or 0)
            downloaded = 0
            last_progress = -1

            with open(dest, "wb") as f:
                while True:
                    chunk = resp.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    downloaded += len(chunk)

                    # Progress tracking (log every 10%)
                    if total > 0:
                        pct = int(downloaded * 100 / total)
                        if pct >= last_progress + 10:
                            last_progress = pct
                            logger.info(
                                "Download progress: %d%% (%s / %s)",
                                pct, _fmt_size(downloaded), _fmt_size(total),
                            )
    except DownloadError:
        dest.unlink(missing_ok=True)
        raise
    except urllib.error.HTTPError as e:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"GET {url} returned HTTP {e.code} {e.reason}") from e
    except (urllib.error.URLError, OSError) as e:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"Download failed for {url}: {e}") from e

    if total and downloaded != total:
        dest.unlink(missing_ok=True)
        raise DownloadError(
            f"Truncated download from {url}: got {downloaded} of {total} bytes"
        )

    logger.info("Downloaded %s to %s", _fmt_size(downloaded), dest)
    return downloaded


def extract_tarball(archive: Path, dest: Path) -> None:
    """Extract a gzip tarball into ``dest``.

    Uses tarfile's ``data`` filter: absolute paths, ``..`` traversal
    and device files are rejected, executable bits survive.

    Raises:
        ExtractionError: Corrupt, truncated or unsafe archive.
    """
    dest.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive, "r:gz") as tf:
            tf.extractall(dest, filter="data")
    except (tarfile.TarError, EOFError, zlib.error, OSError) as e:
        raise ExtractionError(f"Extract failed for {archive.name}: {e}") from e

    logger.debug("Extracted %s into %s", archive.name, dest)
