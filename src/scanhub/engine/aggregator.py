"""Merge unit outcomes into one scan result."""

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime

from scanhub.models import ScanResult, Vulnerability, utc_now

from .units import UnitOutcome

logger = logging.getLogger(__name__)


class ResultAggregator:
    """Deterministic merge: everything is ordered by unit submission index."""

    def __init__(
        self,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._new_id = id_factory or (lambda: str(uuid.uuid4()))
        self._clock = clock

    def aggregate(self, task_id: str, outcomes: Iterable[UnitOutcome]) -> ScanResult:
        ordered = sorted(outcomes, key=lambda outcome: outcome.unit.index)
        logs: list[str] = []
        vulnerabilities: list[Vulnerability] = []

        if not ordered:
            logs.append(f"No scan units were executed for task {task_id}")

        for outcome in ordered:
            logs.extend(outcome.logs)
            vulnerabilities.extend(outcome.vulnerabilities)
            if outcome.error is not None:
                logs.append(outcome.error_line(outcome.error))
            elif not outcome.logs:
                logs.append(
                    f"{outcome.unit.label}: completed with "
                    f"{len(outcome.vulnerabilities)} findings"
                )

        result = ScanResult(
            result_id=self._new_id(),
            scan_task_id=task_id,
            timestamp=self._clock(),
            execution_logs=tuple(logs),
            vulnerabilities=tuple(vulnerabilities),
        )
        failed = sum(1 for outcome in ordered if not outcome.succeeded)
        logger.info(
            "Aggregated %d units for task %s: %d findings, %d failed units, highest %s",
            len(ordered),
            task_id,
            len(vulnerabilities),
            failed,
            result.highest_severity.label,
        )
        return result
