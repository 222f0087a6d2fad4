"""Configuration loading for cloudbot.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from cloudbot.config import get_settings

    settings = get_settings()
    timeout = settings.pricing.quote_timeout_seconds
"""

from functools import lru_cache

from cloudbot.config.loader import load_config
from cloudbot.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance.

    Call `get_settings.cache_clear()` to reload configuration.
    """
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
