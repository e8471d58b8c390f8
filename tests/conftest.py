"""Test configuration and fixtures for ScanHub."""

import tempfile
from collections.abc import Callable, Generator
from datetime import timedelta
from pathlib import Path

import pytest

from scanhub.db import ScanRepository, init_db
from scanhub.engine import WorkerPool
from scanhub.models import (
    JwtCredential,
    ScanTask,
    ScanTaskRequest,
    SchedulingMetadata,
    utc_now,
)

TEST_TOKEN = "eyJhbGciOiJIUzI1NiJ9.eyJzdWIiOiJ0ZXN0In0.sig"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """Return the database path inside the temp directory."""
    return temp_dir / "data" / "scanhub.db"


@pytest.fixture
def initialized_db(db_path: Path) -> Path:
    """Initialize the database and return its path."""
    engine = init_db(db_path)
    engine.dispose()
    return db_path


@pytest.fixture
def repository(initialized_db: Path) -> Generator[ScanRepository, None, None]:
    """Repository bound to a fresh SQLite file."""
    repo = ScanRepository.from_path(initialized_db)
    yield repo
    repo.engine.dispose()


@pytest.fixture
def worker_pool() -> Generator[WorkerPool, None, None]:
    """A private pool so tests never share the process-wide one."""
    pool = WorkerPool(4)
    yield pool
    pool.shutdown(wait=False)


@pytest.fixture
def make_task() -> Callable[..., ScanTask]:
    """Factory for valid scan tasks; keyword arguments override fields."""

    def _make(**overrides) -> ScanTask:
        created_at = overrides.pop("created_at", utc_now())
        values = {
            "id": "task-1",
            "target_urls": ("https://example.com",),
            "scanning_depth": 2,
            "protocol_types": ("HTTPS",),
            "scheduling": SchedulingMetadata(created_at + timedelta(minutes=5)),
            "credentials": JwtCredential(TEST_TOKEN),
            "created_at": created_at,
        }
        values.update(overrides)
        return ScanTask(**values)

    return _make


@pytest.fixture
def make_request() -> Callable[..., ScanTaskRequest]:
    """Factory for intake requests; keyword arguments override fields."""

    def _make(**overrides) -> ScanTaskRequest:
        values = {
            "target_urls": ["https://example.com"],
            "protocol_types": ["HTTPS"],
            "scanning_depth": 2,
            "credentials": f"Bearer {TEST_TOKEN}",
        }
        values.update(overrides)
        return ScanTaskRequest(**values)

    return _make
