"""
Platform detection — host OS/arch → release asset naming.

``resolve_platform`` is pure: it takes the raw strings the host
reports and returns a ``PlatformIdentity`` or raises.  Only
``detect_platform`` touches the running interpreter.
"""

from __future__ import annotations

import logging
import platform
import sys

from conformance_runner.core.errors import UnsupportedPlatformError
from conformance_runner.core.models.platform import PlatformIdentity

logger = logging.getLogger(__name__)

# Host OS report prefix → artifact OS name.  Matched case-insensitively,
# in order, against values like sys.platform ("linux", "darwin", "win32")
# or shell OSTYPE ("linux-gnu", "darwin23", "msys").
_OS_PREFIX_MAP: tuple[tuple[str, str], ...] = (
    ("darwin", "Darwin"),
    ("linux", "Linux"),
    ("msys", "Windows"),
    ("win32", "Windows"),
    ("cygwin", "Windows"),
    ("windows", "Windows"),
)

SUPPORTED_OS = ("Darwin", "Linux", "Windows")


def resolve_platform(os_report: str, arch_report: str) -> PlatformIdentity:
    """Translate raw host reports into the artifact naming convention.

    Args:
        os_report: Host OS identifier (``sys.platform``, ``OSTYPE``, ...).
        arch_report: Host machine string (``uname -m``).  Used verbatim.

    Raises:
        UnsupportedPlatformError: Unknown OS or empty architecture.
    """
    raw_os = (os_report or "").strip()
    lowered = raw_os.lower()

    artifact_os = None
    for prefix, name in _OS_PREFIX_MAP:
        if lowered.startswith(prefix):
            artifact_os = name
            break

    if artifact_os is None:
        raise UnsupportedPlatformError(
            f"Unsupported platform: unknown OS {raw_os!r} "
            f"(supported: {', '.join(SUPPORTED_OS)})"
        )

    arch = (arch_report or "").strip()
    if not arch:
        raise UnsupportedPlatformError(
            f"Unsupported platform: host did not report a CPU architecture for {artifact_os}"
        )

    return PlatformIdentity(os=artifact_os, arch=arch)


def detect_platform() -> PlatformIdentity:
    """Resolve the identity of the running host."""
    identity = resolve_platform(sys.platform, platform.machine())
    logger.debug("Detected platform %s (sys.platform=%s)", identity, sys.platform)
    return identity
