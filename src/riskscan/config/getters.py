"""Configuration getter functions."""

import os
from pathlib import Path
from typing import Any

from .env_loader import load_global_config, load_local_env


def get_config(key: str, work_dir: Path | None = None, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. .env file in the working directory
    3. Global config file
    4. Default value

    Args:
        key: Configuration key
        work_dir: Directory holding the .env file (defaults to cwd)
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    local_config = load_local_env(work_dir)
    if key in local_config:
        return local_config[key]

    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    return default


def get_float(key: str, default: float, work_dir: Path | None = None) -> float:
    """Get a float setting, falling back to *default* on bad values."""
    try:
        return float(get_config(key, work_dir, default))
    except (TypeError, ValueError):
        return default


def get_int(key: str, default: int, work_dir: Path | None = None) -> int:
    """Get an int setting, falling back to *default* on bad values."""
    try:
        return int(get_config(key, work_dir, default))
    except (TypeError, ValueError):
        return default


def get_bool(key: str, default: bool, work_dir: Path | None = None) -> bool:
    value = get_config(key, work_dir, None)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
