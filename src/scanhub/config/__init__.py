"""
Configuration management for ScanHub.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Data directory .env file (~/.scanhub/.env or $SCANHUB_DATA_DIR/.env)
3. Global config file (~/.scanhub/config.yml)
4. Default values (lowest priority)
"""

from .env_loader import get_data_dir, load_env_file, load_global_config
from .getters import ConfigSource
from .settings import Settings, ToolSettings, load_settings

__all__ = [
    "ConfigSource",
    "Settings",
    "ToolSettings",
    "get_data_dir",
    "load_env_file",
    "load_global_config",
    "load_settings",
]
