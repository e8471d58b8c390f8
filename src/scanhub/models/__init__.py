"""Domain data model for scan tasks and results."""

from .credentials import BasicCredential, Credential, JwtCredential, credential_from_header
from .responses import (
    ResultStatus,
    ScanCompletion,
    ScanResultResponse,
    ScanTaskRequest,
    ScanTaskResponse,
)
from .result import ScanResult, Vulnerability
from .severity import Severity
from .task import (
    MAX_DEPTH,
    Protocol,
    ScanConfig,
    ScanConfigBuilder,
    ScanTask,
    SchedulingMetadata,
    TaskStatus,
    as_utc,
    utc_now,
)

__all__ = [
    "BasicCredential",
    "Credential",
    "JwtCredential",
    "MAX_DEPTH",
    "Protocol",
    "ResultStatus",
    "ScanCompletion",
    "ScanConfig",
    "ScanConfigBuilder",
    "ScanResult",
    "ScanResultResponse",
    "ScanTask",
    "ScanTaskRequest",
    "ScanTaskResponse",
    "SchedulingMetadata",
    "Severity",
    "TaskStatus",
    "Vulnerability",
    "as_utc",
    "credential_from_header",
    "utc_now",
]
