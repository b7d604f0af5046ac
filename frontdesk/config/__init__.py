"""Configuration loading for Frontdesk.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from frontdesk.config import get_settings

    settings = get_settings()
    ttl = settings.cache.compiled_rules_ttl_seconds
"""

from functools import lru_cache

from frontdesk.config.loader import load_config
from frontdesk.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{FRONTDESK_ENV}.toml (environment overrides)
    4. FRONTDESK_* environment variables (runtime overrides)

    The result is cached for the lifetime of the process.
    """
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
