"""Error taxonomy for scan orchestration."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Stable machine-readable error codes."""

    VALIDATION = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED_SCAN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    AUTH_SERVICE = "AUTH_SERVICE_ERROR"
    SCAN_EXECUTION = "SCAN_EXECUTION_ERROR"
    SCAN_TIMEOUT = "SCAN_TIMEOUT"
    PERSISTENCE = "PERSISTENCE_ERROR"
    CONFIG = "CONFIG_ERROR"
    NOT_FOUND = "NOT_FOUND"


class ScanHubError(Exception):
    """Base class for every error raised by the engine."""

    code: ErrorCode = ErrorCode.SCAN_EXECUTION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ScanHubError):
    """Caller input defect. Returned by the validator, raised by the dispatcher."""

    code = ErrorCode.VALIDATION

    def __init__(self, field: str, value: Any, message: str):
        super().__init__(message)
        self.field = field
        self.value = value

    def __repr__(self) -> str:
        return f"ValidationError(field={self.field!r}, message={self.message!r})"


class UnauthorizedError(ScanHubError):
    """Authorization was explicitly denied for a task."""

    code = ErrorCode.UNAUTHORIZED


class InvalidCredentialsError(UnauthorizedError):
    """The task carries no usable credentials."""

    code = ErrorCode.INVALID_CREDENTIALS


class AuthServiceError(ScanHubError):
    """The authorization collaborator itself failed."""

    code = ErrorCode.AUTH_SERVICE


class ScanExecutionError(ScanHubError):
    """A single scan unit failed inside one tool."""

    code = ErrorCode.SCAN_EXECUTION

    def __init__(self, tool: str, phase: str, message: str):
        super().__init__(f"{tool} {phase} failed: {message}")
        self.tool = tool
        self.phase = phase
        self.detail = message


class ScanTimeoutError(ScanHubError):
    """The global scan deadline elapsed before every unit resolved."""

    code = ErrorCode.SCAN_TIMEOUT

    def __init__(self, task_id: str, deadline: float, pending: int = 0):
        super().__init__(
            f"Scan timeout for task {task_id}: {pending} unit(s) still running "
            f"after {deadline:g}s"
        )
        self.task_id = task_id
        self.deadline = deadline
        self.pending = pending


class PersistenceError(ScanHubError):
    """A repository read or write failed."""

    code = ErrorCode.PERSISTENCE

    def __init__(self, operation: str, message: str):
        super().__init__(f"Repository {operation} failed: {message}")
        self.operation = operation


class ConfigError(ScanHubError):
    """A configuration value is missing or malformed."""

    code = ErrorCode.CONFIG

    def __init__(self, key: str, message: str):
        super().__init__(f"Invalid configuration for {key}: {message}")
        self.key = key


class TaskNotFoundError(ScanHubError):
    """No task is stored under the requested id."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, task_id: str):
        super().__init__(f"Scan task not found: {task_id}")
        self.task_id = task_id
