"""TOML configuration loader with deep merge support."""

import os
import tomllib
from pathlib import Path
from typing import Any


def get_config_dir() -> Path:
    """Get the configuration directory path.

    The config directory can be overridden with CLOUDBOT_CONFIG_DIR env var.
    Defaults to 'config/' relative to the project root.

    Returns:
        Path to the config directory; the first 'config/' found walking up
        from the working directory, else a relative 'config' path

    Raises:
        FileNotFoundError: CLOUDBOT_CONFIG_DIR points at a missing directory
    """
    config_dir_env = os.environ.get("CLOUDBOT_CONFIG_DIR")
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
        return path

    current = Path.cwd()
    for _ in range(5):
        config_path = current / "config"
        if config_path.exists():
            return config_path
        current = current.parent

    return Path("config")


def get_environment() -> str:
    """Get the current environment from CLOUDBOT_ENV, defaulting to 'development'."""
    return os.environ.get("CLOUDBOT_ENV", "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary.

    Args:
        file_path: Path to the TOML file

    Returns:
        Parsed TOML content

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested tables merge key by key; any other value in ``override`` replaces
    the one in ``base``.

    Args:
        base: Base dictionary
        override: Dictionary whose values take precedence

    Returns:
        New merged dictionary; neither input is modified
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Load configuration from TOML files.

    Loading order:
    1. config/default.toml (required)
    2. config/{CLOUDBOT_ENV}.toml (optional)

    Returns:
        Merged configuration dictionary

    Raises:
        FileNotFoundError: config/default.toml is missing
    """
    config_dir = get_config_dir()
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            "Create config/default.toml or set CLOUDBOT_CONFIG_DIR."
        )

    config = load_toml(default_path)

    env_path = config_dir / f"{get_environment()}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    return config
