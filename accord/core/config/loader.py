"""
Configuration loader — reads the accord settings file.

Lookup order:
    1. explicit path (``--config``)
    2. ``ACCORD_CONFIG`` environment variable
    3. ``/etc/accord/config.yml``
    4. built-in defaults

A file that was explicitly requested must exist; the system-wide file is
optional.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from accord.core.errors import ConfigError
from accord.core.models.settings import Settings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ACCORD_CONFIG"
SYSTEM_CONFIG_FILE = Path("/etc/accord/config.yml")


def find_config_file(explicit: Path | None = None) -> tuple[Path | None, bool]:
    """Resolve which settings file to read.

    Returns:
        ``(path, required)``: ``path`` is None when no file applies;
        ``required`` is True when the user named the file.
    """
    if explicit is not None:
        return Path(explicit), True

    env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path), True

    if SYSTEM_CONFIG_FILE.is_file():
        return SYSTEM_CONFIG_FILE, False

    return None, False


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit settings file. If None, the lookup order applies.

    Returns:
        Validated Settings, with ``source`` naming the file it came from.

    Raises:
        ConfigError: If a requested file is missing or any file is invalid.
    """
    path, required = find_config_file(path)

    if path is None:
        logger.debug("No settings file found; using defaults")
        return Settings()

    if not path.is_file():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        return Settings()

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
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    data.pop("source", None)
    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {_first_error(e)}") from e

    return settings.model_copy(update={"source": str(path)})


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err["loc"])
    return f"{loc}: {err['msg']}" if loc else err["msg"]
