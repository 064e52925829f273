"""
Configuration loader — reads conformance-runner.yml into RunnerConfig.

The file is optional.  When none is given and none is found, the
defaults baked into ``RunnerConfig`` apply and the project root is
the current directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from conformance_runner.core.errors import RunnerError
from conformance_runner.core.models.config import RunnerConfig

logger = logging.getLogger(__name__)

# Default config filename
RUNNER_CONFIG_FILE = "conformance-runner.yml"


class ConfigError(RunnerError):
    """Raised when runner configuration is invalid or unreadable."""

    step = "config"


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for conformance-runner.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to conformance-runner.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / RUNNER_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None, *, search: bool = True) -> RunnerConfig:
    """Load and validate runner configuration.

    Args:
        path: Explicit path to conformance-runner.yml.  An explicit path
            that does not exist is an error.
        search: When ``path`` is None, search upward from cwd.  If nothing
            is found, defaults are returned.

    Returns:
        Validated RunnerConfig.

    Raises:
        ConfigError: If the file is missing (explicit path) or invalid.
    """
    if path is None and search:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", RUNNER_CONFIG_FILE)
        return RunnerConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading runner config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return RunnerConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "conformance" key or be flat
    section = data.get("conformance", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected 'conformance' to be a mapping in {path}")

    try:
        config = RunnerConfig.model_validate(section)
    except Exception as e:
        raise ConfigError(f"Invalid runner configuration: {e}") from e

    logger.info("Loaded runner config: %s v%s", config.tool_name, config.version)
    return config


def project_root(config_path: Path | None) -> Path:
    """Get the project root directory from a config file path (or cwd)."""
    if config_path is None:
        return Path.cwd().resolve()
    return config_path.parent.resolve()


def resolve_path(root: Path, value: str | Path) -> Path:
    """Resolve a config path value against the project root."""
    p = Path(value).expanduser()
    return p if p.is_absolute() else root / p
