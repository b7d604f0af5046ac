"""TOML configuration files: discovery, parsing and layering.

Layout::

    config/default.toml        required, every deployment
    config/{FRONTDESK_ENV}.toml  optional overlay (development, test, production)
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from frontdesk.errors import ConfigurationError

CONFIG_DIR_ENV = "FRONTDESK_CONFIG_DIR"
ENVIRONMENT_ENV = "FRONTDESK_ENV"
DEFAULT_ENVIRONMENT = "development"

# Parent directories searched for config/ when no override is set
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Locate the config directory.

    FRONTDESK_CONFIG_DIR wins; otherwise the nearest config/ walking up from
    the working directory.

    Raises:
        ConfigurationError: FRONTDESK_CONFIG_DIR names a missing directory
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise ConfigurationError(f"{CONFIG_DIR_ENV} is not a directory: {override}")
        return path

    search = Path.cwd()
    for _ in range(_SEARCH_DEPTH):
        if (search / "config").is_dir():
            return search / "config"
        search = search.parent
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        ConfigurationError: missing file or invalid TOML, naming the file
    """
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {file_path}: {e}") from e


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Read default.toml and layer the environment file over it."""
    config_dir = get_config_dir()
    config = load_toml(config_dir / "default.toml")

    overlay = config_dir / f"{get_environment()}.toml"
    if overlay.is_file():
        config = deep_merge(config, load_toml(overlay))
    return config
