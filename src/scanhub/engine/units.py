"""Scan units and the collector their outcomes funnel into."""

import threading
from dataclasses import dataclass, field

from scanhub.errors import ScanExecutionError
from scanhub.models import Protocol, Vulnerability


@dataclass(frozen=True)
class ScanUnit:
    """One (protocol, URL) pair; ``index`` is its submission position."""

    index: int
    protocol: Protocol
    url: str

    @property
    def label(self) -> str:
        return f"[{self.protocol.name}] {self.url}"


@dataclass
class UnitOutcome:
    """What one unit produced: logs and findings, or an isolated error."""

    unit: ScanUnit
    tool: str = ""
    logs: list[str] = field(default_factory=list)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)
    error: ScanExecutionError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def error_line(self, error: ScanExecutionError) -> str:
        return (
            f"Scan error ({self.unit.protocol.name}) {self.unit.url} "
            f"[tool={error.tool}, phase={error.phase}]: {error.detail}"
        )


class OutcomeCollector:
    """Thread-safe accumulator shared by the units of one dispatch."""

    def __init__(self):
        self._lock = threading.Lock()
        self._outcomes: list[UnitOutcome] = []

    def record(self, outcome: UnitOutcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)

    def snapshot(self) -> list[UnitOutcome]:
        """Outcomes in completion order."""
        with self._lock:
            return list(self._outcomes)
