"""
Configuration loader — reads devsetup.yml into SetupSettings.

The file is optional: with no file every setting keeps its default.
A file that exists but cannot be parsed or validated is an error.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from devsetup.core.models.settings import SetupSettings

logger = logging.getLogger(__name__)

CONFIG_FILE = "devsetup.yml"
CONFIG_ENV_VAR = "DEVSETUP_CONFIG"
USER_CONFIG_PATH = Path("~/.config/devsetup/config.yml")


class ConfigError(Exception):
    """Raised when devsetup configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None, home: Path | None = None) -> Path | None:
    """Locate the config file.

    Search order: ``$DEVSETUP_CONFIG``, ``devsetup.yml`` in *start_dir*
    and its parents, then ``~/.config/devsetup/config.yml``.

    Returns:
        Path to the config file, or None if none exists.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()

    current = (start_dir or Path.cwd()).resolve()
    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    user_path = (home / ".config/devsetup/config.yml") if home else USER_CONFIG_PATH.expanduser()
    if user_path.is_file():
        return user_path

    return None


def load_settings(path: Path | None = None) -> SetupSettings:
    """Load and validate settings.

    Args:
        path: Explicit config path. If None, searches with
            ``find_config_file``; no file found means defaults.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return SetupSettings()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        raise ConfigError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return SetupSettings()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = SetupSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded settings from %s (mode=%s)", path, settings.mode.value)
    return settings
