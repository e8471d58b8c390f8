"""Configuration getter functions."""

import os
from typing import Any

from scanhub.errors import ConfigError

from .env_loader import get_data_dir, load_env_file, load_global_config, lookup_path


class ConfigSource:
    """Layered configuration lookup.

    Priority:
    1. Environment variable
    2. .env file in the data directory
    3. Global config.yml (nested keys)
    4. Default value
    """

    def __init__(
        self,
        env: dict[str, str] | None = None,
        dotenv: dict[str, str] | None = None,
        global_config: dict[str, Any] | None = None,
    ):
        self.env = os.environ if env is None else env
        self.dotenv = dotenv if dotenv is not None else load_env_file(get_data_dir() / ".env")
        self.global_config = global_config if global_config is not None else load_global_config()

    def get(self, key: str, yaml_path: str | None = None, default: Any = None) -> Any:
        # 1. Check environment variable
        env_value = self.env.get(key)
        if env_value:
            return env_value

        # 2. Check .env file
        if self.dotenv.get(key):
            return self.dotenv[key]

        # 3. Check global config
        if yaml_path:
            value = lookup_path(self.global_config, yaml_path)
            if value is not None:
                return value
        if key in self.global_config:
            return self.global_config[key]

        # 4. Return default
        return default

    def get_int(self, key: str, yaml_path: str | None = None, default: int = 0) -> int:
        value = self.get(key, yaml_path, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(key, f"expected an integer, got {value!r}") from None

    def get_float(self, key: str, yaml_path: str | None = None, default: float = 0.0) -> float:
        value = self.get(key, yaml_path, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(key, f"expected a number, got {value!r}") from None

    def get_bool(self, key: str, yaml_path: str | None = None, default: bool = False) -> bool:
        value = self.get(key, yaml_path, default)
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("1", "true", "yes", "on")
