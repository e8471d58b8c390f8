"""SQLAlchemy-backed storage for scan tasks and their results."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scanhub.errors import PersistenceError
from scanhub.models import (
    ScanConfigBuilder,
    ScanResult,
    ScanTask,
    SchedulingMetadata,
    TaskStatus,
    Vulnerability,
    as_utc,
    utc_now,
)

from .init import get_session_factory, init_db
from .models import ScanResultRecord, ScanTaskRecord

logger = logging.getLogger(__name__)


class ScanRepository:
    """Task and result persistence. Saves are full-entity upserts keyed by id."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory: Callable[[], Session] = get_session_factory(engine)

    @classmethod
    def from_path(cls, db_path: Path) -> "ScanRepository":
        return cls(init_db(db_path))

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Repository %s failed: %s", operation, exc)
            raise PersistenceError(operation, type(exc).__name__) from exc
        finally:
            session.close()

    # -- tasks -------------------------------------------------------------

    def save_task(self, task: ScanTask, status: TaskStatus, message: str = "") -> None:
        with self._session("save_task") as session:
            session.merge(
                ScanTaskRecord(
                    id=task.id,
                    target_urls=list(task.target_urls),
                    protocol_types=[p.value for p in task.protocol_types],
                    scanning_depth=task.scanning_depth,
                    credential_kind=task.credential_kind,
                    scope=task.config.scope,
                    start_time=task.scheduling.start_time if task.scheduling else None,
                    created_at=task.created_at,
                    status=status.value,
                    status_message=message,
                    updated_at=utc_now(),
                )
            )

    def update_task_status(self, task_id: str, status: TaskStatus, message: str = "") -> bool:
        """Set a task's status. Returns False when the task is not stored."""
        with self._session("update_task_status") as session:
            record = session.get(ScanTaskRecord, task_id)
            if record is None:
                return False
            record.status = status.value
            record.status_message = message
            record.updated_at = utc_now()
            return True

    def find_task_by_id(self, task_id: str) -> ScanTask | None:
        """Rebuild a stored task. Credentials are never stored, so they come back empty."""
        with self._session("find_task_by_id") as session:
            record = session.get(ScanTaskRecord, task_id)
            if record is None:
                return None
            return self._to_task(record)

    def find_task_status(self, task_id: str) -> tuple[TaskStatus, str] | None:
        with self._session("find_task_status") as session:
            record = session.get(ScanTaskRecord, task_id)
            if record is None:
                return None
            return TaskStatus(record.status), record.status_message or ""

    # -- results -----------------------------------------------------------

    def save_result(self, result: ScanResult) -> None:
        with self._session("save_result") as session:
            session.merge(
                ScanResultRecord(
                    result_id=result.result_id,
                    scan_task_id=result.scan_task_id,
                    vulnerabilities=[v.to_dict() for v in result.vulnerabilities],
                    execution_logs=list(result.execution_logs),
                    highest_severity=result.highest_severity.label,
                    timestamp=result.timestamp,
                )
            )
        logger.info("Stored result %s for task %s", result.result_id, result.scan_task_id)

    def find_result_by_id(self, result_id: str) -> ScanResult | None:
        with self._session("find_result_by_id") as session:
            record = session.get(ScanResultRecord, result_id)
            return self._to_result(record) if record is not None else None

    def find_results_by_task_id(self, task_id: str) -> list[ScanResult]:
        with self._session("find_results_by_task_id") as session:
            records = session.scalars(
                select(ScanResultRecord)
                .where(ScanResultRecord.scan_task_id == task_id)
                .order_by(ScanResultRecord.timestamp)
            ).all()
            return [self._to_result(record) for record in records]

    # -- mapping -----------------------------------------------------------

    @staticmethod
    def _to_task(record: ScanTaskRecord) -> ScanTask:
        start_time = as_utc(record.start_time)
        config = (
            ScanConfigBuilder()
            .depth(record.scanning_depth)
            .protocols(record.protocol_types)
            .scope(record.scope or "strict")
            .build()
        )
        return ScanTask(
            id=record.id,
            target_urls=tuple(record.target_urls or ()),
            scanning_depth=record.scanning_depth,
            protocol_types=tuple(record.protocol_types or ()),
            scheduling=SchedulingMetadata(start_time) if start_time is not None else None,
            credentials=None,
            created_at=as_utc(record.created_at) or utc_now(),
            config=config,
        )

    @staticmethod
    def _to_result(record: ScanResultRecord) -> ScanResult:
        return ScanResult(
            result_id=record.result_id,
            scan_task_id=record.scan_task_id,
            timestamp=as_utc(record.timestamp),
            execution_logs=tuple(record.execution_logs or ()),
            vulnerabilities=tuple(Vulnerability.from_dict(v) for v in record.vulnerabilities or ()),
        )
