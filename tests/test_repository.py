"""Tests for database models and the scan repository."""

from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from scanhub.db import ScanRepository, ScanTaskRecord, create_db_engine, init_db
from scanhub.errors import PersistenceError
from scanhub.models import (
    Protocol,
    ScanResult,
    SchedulingMetadata,
    Severity,
    TaskStatus,
    Vulnerability,
    utc_now,
)


def _result(result_id: str = "r-1", task_id: str = "task-1", **overrides) -> ScanResult:
    values = {
        "result_id": result_id,
        "scan_task_id": task_id,
        "timestamp": datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
        "execution_logs": ("started", "done"),
        "vulnerabilities": (Vulnerability("XSS", Severity.HIGH, "reflected", "/search"),),
    }
    values.update(overrides)
    return ScanResult(**values)


class TestDatabaseInitialization:
    """Test database initialization."""

    def test_init_db_creates_tables(self, db_path: Path):
        engine = init_db(db_path)
        engine.dispose()

        assert db_path.exists()
        assert db_path.stat().st_size > 0

    def test_init_db_creates_parent_directories(self, temp_dir: Path):
        nested_db = temp_dir / "nested" / "path" / "scanhub.db"
        engine = init_db(nested_db)
        engine.dispose()

        assert nested_db.exists()


class TestTasks:
    """Task persistence."""

    def test_save_and_find_task(self, repository: ScanRepository, make_task):
        task = make_task(
            target_urls=("https://a.test", "ftp://b.test"),
            protocol_types=("HTTPS", "FTP"),
        )

        repository.save_task(task, TaskStatus.PENDING, "accepted")
        loaded = repository.find_task_by_id(task.id)

        assert loaded is not None
        assert loaded.target_urls == task.target_urls
        assert loaded.protocol_types == (Protocol.HTTPS, Protocol.FTP)
        assert loaded.scanning_depth == task.scanning_depth
        assert loaded.scheduling.start_time == task.scheduling.start_time
        assert loaded.created_at == task.created_at
        assert loaded.created_at.tzinfo is not None

    def test_credentials_are_not_stored(self, repository: ScanRepository, make_task):
        task = make_task()

        repository.save_task(task, TaskStatus.PENDING)

        assert repository.find_task_by_id(task.id).credentials is None
        with repository.engine.connect() as conn:
            kind = conn.execute(
                select(ScanTaskRecord.credential_kind).where(ScanTaskRecord.id == task.id)
            ).scalar_one()
        assert kind == "jwt"

    def test_offset_start_time_keeps_its_instant(self, repository: ScanRepository, make_task):
        eastern = timezone(timedelta(hours=-5))
        start = (utc_now() + timedelta(hours=1)).astimezone(eastern)
        task = make_task(scheduling=SchedulingMetadata(start))

        repository.save_task(task, TaskStatus.PENDING)
        loaded = repository.find_task_by_id(task.id)

        assert loaded.scheduling.start_time == start
        assert loaded.scheduling.start_time.utcoffset() == timedelta(0)
        assert not loaded.scheduling.is_before(loaded.created_at)

    def test_update_status(self, repository: ScanRepository, make_task):
        task = make_task()
        repository.save_task(task, TaskStatus.PENDING)

        updated = repository.update_task_status(task.id, TaskStatus.FAILED, "denied")

        assert updated is True
        assert repository.find_task_status(task.id) == (TaskStatus.FAILED, "denied")

    def test_update_missing_task(self, repository: ScanRepository):
        assert repository.update_task_status("nope", TaskStatus.FAILED) is False

    def test_missing_task_lookups(self, repository: ScanRepository):
        assert repository.find_task_by_id("nope") is None
        assert repository.find_task_status("nope") is None

    def test_save_task_upserts(self, repository: ScanRepository, make_task):
        task = make_task()
        repository.save_task(task, TaskStatus.PENDING)
        repository.save_task(task, TaskStatus.INVALID, "bad")

        assert repository.find_task_status(task.id) == (TaskStatus.INVALID, "bad")


class TestResults:
    """Result persistence."""

    def test_save_and_find_result(self, repository: ScanRepository):
        repository.save_result(_result())

        loaded = repository.find_result_by_id("r-1")

        assert loaded == _result()
        assert loaded.highest_severity is Severity.HIGH

    def test_upsert_keeps_one_record_with_latest_data(self, repository: ScanRepository):
        repository.save_result(_result(execution_logs=("first",)))
        repository.save_result(_result(execution_logs=("second",), vulnerabilities=()))

        results = repository.find_results_by_task_id("task-1")

        assert len(results) == 1
        assert results[0].execution_logs == ("second",)
        assert results[0].vulnerabilities == ()

    def test_find_results_by_task_id(self, repository: ScanRepository):
        base = datetime(2024, 5, 1, tzinfo=UTC)
        repository.save_result(_result("r-2", timestamp=base + timedelta(hours=1)))
        repository.save_result(_result("r-1", timestamp=base))
        repository.save_result(_result("r-3", task_id="other"))

        results = repository.find_results_by_task_id("task-1")

        assert [r.result_id for r in results] == ["r-1", "r-2"]

    def test_unknown_result(self, repository: ScanRepository):
        assert repository.find_result_by_id("missing") is None
        assert repository.find_results_by_task_id("missing") == []


class TestFailures:
    """Storage faults surface as PersistenceError."""

    def test_missing_tables_raise_persistence_error(self, temp_dir: Path):
        repo = ScanRepository(create_db_engine(temp_dir / "empty.db"))

        with pytest.raises(PersistenceError) as excinfo:
            repo.save_result(_result())

        assert excinfo.value.operation == "save_result"
        assert isinstance(excinfo.value.__cause__, OperationalError)
        repo.engine.dispose()
