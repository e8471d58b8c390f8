"""Scan task entity and its value objects."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, StrEnum

from .credentials import Credential

MAX_DEPTH = 10
DEFAULT_POLL_INTERVAL = 1.0


def utc_now() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Convert to UTC; naive values are taken as already UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Protocol(Enum):
    """Protocol families a scan task may declare."""

    HTTP = "http"
    HTTPS = "https"
    FTP = "ftp"

    @property
    def prefix(self) -> str:
        return f"{self.value}://"

    def matches_url(self, url: str) -> bool:
        """Case-insensitive exact ``<scheme>://`` prefix match."""
        return url.lower().startswith(self.prefix)

    @classmethod
    def parse(cls, value: "str | Protocol") -> "Protocol":
        if isinstance(value, Protocol):
            return value
        normalized = str(value).strip().lower()
        for protocol in cls:
            if protocol.value == normalized:
                return protocol
        raise ValueError(f"Unknown protocol type: {value}")


class TaskStatus(StrEnum):
    """Externally observed lifecycle of a scan task."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    INVALID = "INVALID"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.INVALID)


@dataclass(frozen=True)
class SchedulingMetadata:
    """When a task is meant to start."""

    start_time: datetime

    def __post_init__(self):
        object.__setattr__(self, "start_time", as_utc(self.start_time))

    @classmethod
    def parse(cls, value: str) -> "SchedulingMetadata":
        """Parse an ISO-8601 start time; naive values are taken as UTC."""
        return cls(start_time=datetime.fromisoformat(value))

    def is_before(self, moment: datetime) -> bool:
        return self.start_time < moment


@dataclass(frozen=True)
class ScanConfig:
    """Per-task settings handed to every scanner adapter."""

    depth: int = 1
    protocols: tuple[Protocol, ...] = ()
    scope: str = "strict"
    poll_interval: float = DEFAULT_POLL_INTERVAL


class ScanConfigBuilder:
    """Collect settings, then build one immutable ScanConfig."""

    def __init__(self):
        self._values: dict[str, object] = {}

    def depth(self, depth: int) -> "ScanConfigBuilder":
        self._values["depth"] = depth
        return self

    def protocols(self, protocols) -> "ScanConfigBuilder":
        self._values["protocols"] = tuple(Protocol.parse(p) for p in protocols)
        return self

    def scope(self, scope: str) -> "ScanConfigBuilder":
        self._values["scope"] = scope
        return self

    def poll_interval(self, seconds: float) -> "ScanConfigBuilder":
        self._values["poll_interval"] = seconds
        return self

    def build(self) -> ScanConfig:
        return ScanConfig(**self._values)


@dataclass(frozen=True)
class ScanTask:
    """A request to scan a set of URLs with one or more protocols."""

    id: str
    target_urls: tuple[str, ...]
    scanning_depth: int
    protocol_types: tuple[Protocol, ...]
    scheduling: SchedulingMetadata | None
    credentials: Credential | None = None
    created_at: datetime = field(default_factory=utc_now)
    config: ScanConfig | None = None

    def __post_init__(self):
        object.__setattr__(self, "created_at", as_utc(self.created_at) or utc_now())
        object.__setattr__(self, "target_urls", tuple(self.target_urls or ()))
        protocols: list[Protocol] = []
        for value in self.protocol_types or ():
            protocol = Protocol.parse(value)
            if protocol not in protocols:
                protocols.append(protocol)
        object.__setattr__(self, "protocol_types", tuple(protocols))
        if self.config is None:
            config = (
                ScanConfigBuilder()
                .depth(self.scanning_depth)
                .protocols(self.protocol_types)
                .build()
            )
            object.__setattr__(self, "config", config)

    @property
    def credential_kind(self) -> str | None:
        return self.credentials.kind if self.credentials else None

    def matching_protocols(self, url: str) -> list[Protocol]:
        return [p for p in self.protocol_types if p.matches_url(url)]
