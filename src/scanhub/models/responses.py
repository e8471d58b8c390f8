"""Request and response shapes exchanged with callers of the engine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from .result import Vulnerability
from .task import TaskStatus


class ResultStatus(StrEnum):
    """Outcome of a result submission or query."""

    PROCESSED = "PROCESSED"
    STORED = "STORED"
    INVALID = "INVALID"
    ERROR = "ERROR"

    @property
    def is_successful(self) -> bool:
        return self in (ResultStatus.PROCESSED, ResultStatus.STORED)


@dataclass
class ScanTaskRequest:
    """Raw task request as delivered by a transport."""

    target_urls: list[str]
    protocol_types: list[str]
    scanning_depth: int
    start_time: datetime | str | None = None
    credentials: str | None = None
    scan_task_id: str | None = None
    scope: str = "strict"


@dataclass
class ScanCompletion:
    """An externally produced result submitted for storage."""

    scan_task_id: str
    vulnerabilities: list[Vulnerability] | None
    execution_logs: list[str] | None
    timestamp: datetime | None


@dataclass(frozen=True)
class ScanTaskResponse:
    """What a caller receives after submitting or running a task."""

    status: TaskStatus
    scan_task_id: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.status in (TaskStatus.FAILED, TaskStatus.INVALID)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "scanTaskId": self.scan_task_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class ScanResultResponse:
    """What a caller receives after storing or querying a result."""

    status: ResultStatus
    result_id: str
    scan_task_id: str
    summary: str
    details: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def invalid(cls, scan_task_id: str, message: str) -> "ScanResultResponse":
        return cls(ResultStatus.INVALID, "INVALID", scan_task_id, message)

    @classmethod
    def error(cls, scan_task_id: str, message: str) -> "ScanResultResponse":
        return cls(ResultStatus.ERROR, "ERROR", scan_task_id, message)

    @property
    def is_successful(self) -> bool:
        return self.status.is_successful

    @property
    def is_error(self) -> bool:
        return not self.status.is_successful

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "resultId": self.result_id,
            "scanTaskId": self.scan_task_id,
            "summary": self.summary,
        }
