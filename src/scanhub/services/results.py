"""Storage and lookup of scan results."""

import logging
import uuid

from scanhub.db import ScanRepository
from scanhub.errors import PersistenceError, ValidationError
from scanhub.models import ResultStatus, ScanCompletion, ScanResult, ScanResultResponse

logger = logging.getLogger(__name__)


def _details(result: ScanResult) -> dict:
    return {
        "highestSeverity": result.highest_severity.label,
        "severityCounts": {s.label: n for s, n in result.severity_counts().items()},
        "vulnerabilities": [v.to_dict() for v in result.vulnerabilities],
        "executionLogs": list(result.execution_logs),
        "timestamp": result.timestamp.isoformat(),
    }


class ScanResultService:
    """Accept externally produced results and serve stored ones."""

    def __init__(self, repository: ScanRepository):
        self.repository = repository

    def store(self, completion: ScanCompletion) -> ScanResultResponse:
        task_id = completion.scan_task_id or ""
        if not task_id.strip():
            return ScanResultResponse.invalid(task_id, "Scan task ID is required")
        if completion.vulnerabilities is None:
            return ScanResultResponse.invalid(task_id, "Vulnerabilities list cannot be null")
        if not completion.execution_logs:
            return ScanResultResponse.invalid(task_id, "Execution logs cannot be empty")
        if completion.timestamp is None:
            return ScanResultResponse.invalid(task_id, "Timestamp is required")

        result = ScanResult(
            result_id=str(uuid.uuid4()),
            scan_task_id=task_id,
            timestamp=completion.timestamp,
            execution_logs=tuple(completion.execution_logs),
            vulnerabilities=tuple(completion.vulnerabilities),
        )
        try:
            result.validate()
        except ValidationError as exc:
            logger.info("Rejected result for task %s: %s", task_id, exc.message)
            return ScanResultResponse.invalid(task_id, exc.message)

        try:
            self.repository.save_result(result)
        except PersistenceError as exc:
            return ScanResultResponse.error(task_id, f"Failed to store scan result: {exc.message}")

        return ScanResultResponse(
            ResultStatus.STORED, result.result_id, task_id, result.summary(), _details(result)
        )

    def results_for_task(self, task_id: str) -> list[ScanResultResponse]:
        try:
            results = self.repository.find_results_by_task_id(task_id)
        except PersistenceError as exc:
            return [ScanResultResponse.error(task_id, exc.message)]
        return [
            ScanResultResponse(
                ResultStatus.PROCESSED,
                result.result_id,
                result.scan_task_id,
                result.summary(),
                _details(result),
            )
            for result in results
        ]

    def get_result(self, result_id: str) -> ScanResultResponse | None:
        try:
            result = self.repository.find_result_by_id(result_id)
        except PersistenceError as exc:
            return ScanResultResponse.error("", exc.message)
        if result is None:
            return None
        return ScanResultResponse(
            ResultStatus.PROCESSED,
            result.result_id,
            result.scan_task_id,
            result.summary(),
            _details(result),
        )
