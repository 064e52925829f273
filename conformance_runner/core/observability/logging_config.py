"""
Logging configuration for the runner's own diagnostics.

The subject build and the harness share the terminal with us, so our
records go to stderr under a ``[runner]`` tag and only the
``conformance_runner`` logger tree is configured.  The root logger is
left to whoever embeds us.

Level precedence:
    --debug / --verbose / --quiet  >  CCR_LOG_LEVEL  >  WARNING

CCR_LOG_FILE adds a full-detail file log at CCR_LOG_FILE_LEVEL
(defaulting to the console level).
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping

PACKAGE_LOGGER = "conformance_runner"

_TAG = "[runner]"
_CLOCK = "%H:%M:%S"

# Console detail grows as the level drops
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: (f"{_TAG} %(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s", _CLOCK),
    logging.INFO: (f"{_TAG} %(asctime)s %(message)s", _CLOCK),
}
_CONSOLE_DEFAULT: tuple[str, str | None] = (f"{_TAG} %(message)s", None)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if env is None else env
    return env.get("CCR_LOG_LEVEL") or "WARNING"


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = _CONSOLE_DEFAULT
    for threshold in sorted(_CONSOLE_FORMATS):
        if level <= threshold:
            fmt, datefmt = _CONSOLE_FORMATS[threshold]
            break
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """(Re)configure the ``conformance_runner`` logger tree.

    Safe to call more than once; earlier handlers are replaced.

    Returns:
        The configured package logger.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    package = logging.getLogger(PACKAGE_LOGGER)
    for old in list(package.handlers):
        package.removeHandler(old)
        old.close()
    for handler in handlers:
        package.addHandler(handler)

    package.setLevel(min(h.level for h in handlers))
    package.propagate = False
    return package


def _parse_level(level: str | None) -> int:
    """Level name to numeric level; unknown names fall back to WARNING."""
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
