"""Environment variable and configuration file loading."""

import os
from pathlib import Path
from typing import Any

import yaml


def get_data_dir() -> Path:
    """Return the ScanHub data directory ($SCANHUB_DATA_DIR or ~/.scanhub)."""
    data_root = os.environ.get("SCANHUB_DATA_DIR")
    if data_root:
        return Path(data_root)
    return Path.home() / ".scanhub"


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from .env file."""
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


def load_global_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load global configuration from <data dir>/config.yml."""
    config_path = config_path or get_data_dir() / "config.yml"
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def lookup_path(data: dict[str, Any], dotted: str) -> Any:
    """Resolve ``a.b.c`` inside nested dicts, None when absent."""
    current: Any = data
    for part in dotted.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current
