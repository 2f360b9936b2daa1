"""Environment file and global configuration file loading."""

from pathlib import Path
from typing import Any

import yaml


def global_config_dir() -> Path:
    """Return the per-user ~/.riskscan directory."""
    return Path.home() / ".riskscan"


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load KEY=VALUE pairs from a .env file."""
    env_vars = {}
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    # Remove quotes if present
                    value = value.strip().strip("\"'")
                    env_vars[key.strip()] = value
    return env_vars


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.riskscan/config.yml."""
    config_path = global_config_dir() / "config.yml"
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def load_local_env(work_dir: Path | None = None) -> dict[str, str]:
    """Load the .env file from the working directory, if any."""
    return load_env_file((work_dir or Path.cwd()) / ".env")
