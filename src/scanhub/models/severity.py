"""Vulnerability severity levels."""

from enum import Enum


class Severity(Enum):
    """Ordinal criticality; lower priority number means more severe."""

    CRITICAL = 1
    HIGH = 2
    MEDIUM = 3
    LOW = 4
    INFO = 5

    @property
    def priority(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        """Parse a severity name case-insensitively."""
        if isinstance(value, Severity):
            return value
        normalized = str(value).strip().upper()
        if normalized == "INFORMATIONAL":
            normalized = "INFO"
        try:
            return cls[normalized]
        except KeyError:
            raise ValueError(f"Unknown severity: {value}") from None

    @classmethod
    def most_severe(cls, severities) -> "Severity":
        """Return the most severe entry, INFO when there are none."""
        return min(severities, key=lambda s: s.priority, default=cls.INFO)
