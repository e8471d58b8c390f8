"""Scan orchestration and aggregation engine."""

from .aggregator import ResultAggregator
from .dispatcher import ScanDispatcher, build_work_set
from .pool import WorkerPool, get_worker_pool, shutdown_worker_pool
from .units import OutcomeCollector, ScanUnit, UnitOutcome
from .validator import TaskValidator

__all__ = [
    "OutcomeCollector",
    "ResultAggregator",
    "ScanDispatcher",
    "ScanUnit",
    "TaskValidator",
    "UnitOutcome",
    "WorkerPool",
    "build_work_set",
    "get_worker_pool",
    "shutdown_worker_pool",
]
