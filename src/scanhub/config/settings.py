"""Typed runtime settings assembled from the configuration sources."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from scanhub.errors import ConfigError

from .env_loader import get_data_dir
from .getters import ConfigSource

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 8
DEFAULT_SCAN_DEADLINE = 1800.0
DEFAULT_POLL_INTERVAL = 1.0


@dataclass(frozen=True)
class ToolSettings:
    """Connection settings for one external scanning tool."""

    name: str
    host: str
    port: int
    api_key: str = ""
    timeout: int = 120

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    def validate(self) -> None:
        prefix = f"SCANHUB_{self.name.upper()}"
        if not self.host or not self.host.strip():
            raise ConfigError(f"{prefix}_HOST", "host cannot be blank")
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"{prefix}_PORT", f"port {self.port} is outside 1..65535")
        if self.timeout < 1:
            raise ConfigError(f"{prefix}_TIMEOUT", "timeout must be at least 1 second")


@dataclass(frozen=True)
class Settings:
    """Everything the engine needs to run."""

    pool_size: int = DEFAULT_POOL_SIZE
    scan_deadline: float = DEFAULT_SCAN_DEADLINE
    poll_interval: float = DEFAULT_POLL_INTERVAL
    db_path: Path = field(default_factory=lambda: get_data_dir() / "scanhub.db")
    auth_url: str = ""
    auth_allow_all: bool = False
    zap: ToolSettings = field(default_factory=lambda: ToolSettings("zap", "localhost", 8080))
    burp: ToolSettings = field(
        default_factory=lambda: ToolSettings("burp", "localhost", 1337, timeout=180)
    )
    petep: ToolSettings = field(
        default_factory=lambda: ToolSettings("petep", "localhost", 8000, timeout=60)
    )
    verbose: bool = False

    def validate(self) -> None:
        if self.pool_size < 1:
            raise ConfigError("SCANHUB_POOL_SIZE", "pool size must be at least 1")
        if self.scan_deadline <= 0:
            raise ConfigError("SCANHUB_SCAN_DEADLINE", "deadline must be positive")
        if self.poll_interval < 0:
            raise ConfigError("SCANHUB_POLL_INTERVAL", "poll interval cannot be negative")
        for tool in (self.zap, self.burp, self.petep):
            tool.validate()


def _tool_settings(source: ConfigSource, name: str, defaults: ToolSettings) -> ToolSettings:
    prefix = f"SCANHUB_{name.upper()}"
    return ToolSettings(
        name=name,
        host=str(source.get(f"{prefix}_HOST", f"scanners.{name}.host", defaults.host)),
        port=source.get_int(f"{prefix}_PORT", f"scanners.{name}.port", defaults.port),
        api_key=str(source.get(f"{prefix}_API_KEY", f"scanners.{name}.api_key", "") or ""),
        timeout=source.get_int(f"{prefix}_TIMEOUT", f"scanners.{name}.timeout", defaults.timeout),
    )


def load_settings(source: ConfigSource | None = None) -> Settings:
    """Build and validate Settings from env, .env, config.yml and defaults."""
    source = source or ConfigSource()
    defaults = Settings()
    db_path = source.get("SCANHUB_DB_PATH", "storage.db_path")
    settings = Settings(
        pool_size=source.get_int("SCANHUB_POOL_SIZE", "scan.pool_size", defaults.pool_size),
        scan_deadline=source.get_float(
            "SCANHUB_SCAN_DEADLINE", "scan.deadline", defaults.scan_deadline
        ),
        poll_interval=source.get_float(
            "SCANHUB_POLL_INTERVAL", "scan.poll_interval", defaults.poll_interval
        ),
        db_path=Path(db_path) if db_path else defaults.db_path,
        auth_url=str(source.get("SCANHUB_AUTH_URL", "auth.url", "") or ""),
        auth_allow_all=source.get_bool("SCANHUB_AUTH_ALLOW_ALL", "auth.allow_all", False),
        zap=_tool_settings(source, "zap", defaults.zap),
        burp=_tool_settings(source, "burp", defaults.burp),
        petep=_tool_settings(source, "petep", defaults.petep),
        verbose=source.get_bool("SCANHUB_VERBOSE", "verbose", False),
    )
    settings.validate()
    logger.debug(
        "Loaded settings: pool_size=%d deadline=%gs db=%s",
        settings.pool_size,
        settings.scan_deadline,
        settings.db_path,
    )
    return settings
