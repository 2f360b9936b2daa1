"""
Configuration management for riskscan.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. .env file in the working directory
3. Global config file (~/.riskscan/config.yml)
4. Default values (lowest priority)
"""

from .env_loader import (
    global_config_dir,
    load_env_file,
    load_global_config,
    load_local_env,
)
from .getters import get_bool, get_config, get_float, get_int
from .settings import (
    DEFAULT_USER_AGENT,
    VERSION,
    ScanSettings,
    default_db_url,
    load_scan_settings,
)

__all__ = [
    # env_loader
    "global_config_dir",
    "load_env_file",
    "load_global_config",
    "load_local_env",
    # getters
    "get_bool",
    "get_config",
    "get_float",
    "get_int",
    # settings
    "DEFAULT_USER_AGENT",
    "VERSION",
    "ScanSettings",
    "default_db_url",
    "load_scan_settings",
]
