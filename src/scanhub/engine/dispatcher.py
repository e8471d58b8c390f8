"""Fan scan units out to protocol adapters and collect their outcomes."""

import logging
import time
from collections.abc import Mapping
from concurrent.futures import wait

from scanhub.adapters import ScannerAdapter
from scanhub.auth import AuthorizationGate
from scanhub.errors import ScanExecutionError, ScanTimeoutError, ValidationError
from scanhub.models import Protocol, ScanResult, ScanTask

from .aggregator import ResultAggregator
from .pool import WorkerPool
from .units import OutcomeCollector, ScanUnit, UnitOutcome
from .validator import TaskValidator

logger = logging.getLogger(__name__)


def build_work_set(task: ScanTask) -> list[ScanUnit]:
    """One unit per (protocol, URL) pair, protocols outer, URLs inner."""
    units: list[ScanUnit] = []
    for protocol in task.protocol_types:
        for url in task.target_urls:
            if protocol.matches_url(url):
                units.append(ScanUnit(index=len(units), protocol=protocol, url=url))
    return units


class ScanDispatcher:
    """Validate, authorize, run every unit on the shared pool, then aggregate.

    ``dispatch`` blocks until all units resolve or ``deadline`` seconds pass.
    The deadline bounds the whole call, not each unit. A unit that raises is
    recorded as a log line and does not affect its siblings; an expired
    deadline fails the whole dispatch with ScanTimeoutError.
    """

    def __init__(
        self,
        adapters: Mapping[Protocol, ScannerAdapter],
        gate: AuthorizationGate,
        pool: WorkerPool,
        deadline: float,
        validator: TaskValidator | None = None,
        aggregator: ResultAggregator | None = None,
    ):
        if deadline <= 0:
            raise ValueError("Scan deadline must be positive")
        self.adapters = dict(adapters)
        self.gate = gate
        self.pool = pool
        self.deadline = deadline
        self.validator = validator or TaskValidator()
        self.aggregator = aggregator or ResultAggregator()

    def dispatch(self, task: ScanTask) -> ScanResult:
        """Run a task end to end and return its aggregated result."""
        error = self.validator.validate(task)
        if error is not None:
            raise error
        self.gate.authorize(task)

        units = build_work_set(task)
        logger.info("Dispatching %d scan units for task %s", len(units), task.id)
        collector = OutcomeCollector()
        futures = {self.pool.submit(self._run_unit, unit, task, collector): unit for unit in units}

        done, not_done = wait(futures, timeout=self.deadline)
        if not_done:
            withdrawn = sum(1 for future in not_done if future.cancel())
            logger.error(
                "Task %s hit the %gs deadline: %d units unfinished (%d withdrawn from queue)",
                task.id,
                self.deadline,
                len(not_done),
                withdrawn,
            )
            raise ScanTimeoutError(task.id, self.deadline, pending=len(not_done))

        for future in done:
            # _run_unit records its own failures; anything here is a bug in it.
            exc = future.exception()
            if exc is not None:
                unit = futures[future]
                logger.error("Unit %s crashed outside the adapter: %s", unit.label, exc)
                collector.record(
                    UnitOutcome(
                        unit=unit,
                        error=ScanExecutionError("dispatcher", "collect", str(exc)),
                    )
                )

        return self.aggregator.aggregate(task.id, collector.snapshot())

    def _run_unit(self, unit: ScanUnit, task: ScanTask, collector: OutcomeCollector) -> None:
        adapter = self.adapters.get(unit.protocol)
        tool = adapter.name if adapter is not None else "registry"
        started = time.perf_counter()
        try:
            if adapter is None:
                raise ScanExecutionError(
                    tool, "lookup", f"no scanner adapter registered for {unit.protocol.name}"
                )
            output = adapter.scan(unit.url, task.config)
            outcome = UnitOutcome(unit=unit, tool=tool, logs=list(output.logs))
            for vulnerability in output.vulnerabilities:
                try:
                    vulnerability.validate()
                except ValidationError as exc:
                    outcome.logs.append(f"{unit.label}: dropped invalid finding ({exc})")
                    continue
                outcome.vulnerabilities.append(vulnerability)
        except ScanExecutionError as exc:
            logger.warning("Unit %s failed: %s", unit.label, exc)
            outcome = UnitOutcome(unit=unit, tool=exc.tool, error=exc)
        except Exception as exc:
            logger.exception("Unit %s raised an unexpected error", unit.label)
            outcome = UnitOutcome(
                unit=unit,
                tool=tool,
                error=ScanExecutionError(tool, "scan", f"{type(exc).__name__}: {exc}"),
            )
        logger.debug(
            "Unit %s finished in %.2fs (%s)",
            unit.label,
            time.perf_counter() - started,
            "ok" if outcome.succeeded else "failed",
        )
        collector.record(outcome)
