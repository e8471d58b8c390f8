"""Scan result entity and vulnerability findings."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from scanhub.errors import ValidationError

from .severity import Severity
from .task import as_utc


@dataclass(frozen=True)
class Vulnerability:
    """One finding reported by a scanner adapter."""

    type: str
    severity: Severity
    description: str = ""
    location: str = ""

    def validate(self) -> None:
        if not self.type or not self.type.strip():
            raise ValidationError("vulnerability.type", self.type, "Vulnerability type is required")
        if not isinstance(self.severity, Severity):
            raise ValidationError(
                "vulnerability.severity", self.severity, "Vulnerability severity is required"
            )

    @property
    def is_high_risk(self) -> bool:
        return self.severity in (Severity.CRITICAL, Severity.HIGH)

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type,
            "severity": self.severity.label,
            "description": self.description,
            "location": self.location,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Vulnerability":
        return cls(
            type=str(data.get("type") or ""),
            severity=Severity.parse(data.get("severity") or "INFO"),
            description=str(data.get("description") or ""),
            location=str(data.get("location") or ""),
        )


@dataclass(frozen=True)
class ScanResult:
    """Aggregated outcome of every scan unit for one task."""

    result_id: str
    scan_task_id: str
    timestamp: datetime
    execution_logs: tuple[str, ...]
    vulnerabilities: tuple[Vulnerability, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))
        object.__setattr__(self, "execution_logs", tuple(self.execution_logs))
        object.__setattr__(self, "vulnerabilities", tuple(self.vulnerabilities))

    def validate(self) -> None:
        """Raise ValidationError unless every invariant holds."""
        if not self.scan_task_id or not self.scan_task_id.strip():
            raise ValidationError("scan_task_id", self.scan_task_id, "Scan task ID is required")
        if self.timestamp is None:
            raise ValidationError("timestamp", None, "Timestamp is required")
        if not self.execution_logs:
            raise ValidationError("execution_logs", [], "Execution logs cannot be empty")
        for vulnerability in self.vulnerabilities:
            vulnerability.validate()

    @property
    def highest_severity(self) -> Severity:
        """Most severe finding present, INFO when there are none."""
        return Severity.most_severe(v.severity for v in self.vulnerabilities)

    def high_risk_vulnerabilities(self) -> list[Vulnerability]:
        return [v for v in self.vulnerabilities if v.is_high_risk]

    def severity_counts(self) -> dict[Severity, int]:
        counts = Counter(v.severity for v in self.vulnerabilities)
        return {severity: counts[severity] for severity in Severity if counts[severity]}

    def summary(self) -> str:
        text = (
            f"Scan completed with {len(self.vulnerabilities)} findings. "
            f"Execution logs contain {len(self.execution_logs)} entries."
        )
        counts = self.severity_counts()
        if counts:
            breakdown = ", ".join(f"{n} {s.label}" for s, n in counts.items())
            text += f" Found: {breakdown}"
        return text
