"""Tests for task intake and the task state machine."""

import threading
from datetime import timedelta, timezone

import pytest

from scanhub.adapters import AdapterOutput, ScannerAdapter
from scanhub.auth import AuthorizationGate, AuthorizationService, StaticAuthorizationService
from scanhub.engine import ScanDispatcher, WorkerPool
from scanhub.models import (
    JwtCredential,
    Protocol,
    ScanConfig,
    Severity,
    TaskStatus,
    Vulnerability,
    utc_now,
)
from scanhub.services import ScanTaskService

TEST_TOKEN = "eyJhbGciOiJIUzI1NiJ9.eyJzdWIiOiJ0ZXN0In0.sig"


class FakeAdapter(ScannerAdapter):
    """Adapter returning one finding per URL."""

    name = "fake"

    def __init__(self):
        self.calls: list[tuple[str, ScanConfig]] = []

    def scan(self, url: str, config: ScanConfig) -> AdapterOutput:
        self.calls.append((url, config))
        return AdapterOutput(
            logs=[f"scanned {url}"],
            vulnerabilities=[Vulnerability("Open redirect", Severity.LOW, location=url)],
        )


class SlowAdapter(ScannerAdapter):
    """Adapter that outlives any short deadline."""

    name = "slow"

    def __init__(self):
        self.release = threading.Event()

    def scan(self, url: str, config: ScanConfig) -> AdapterOutput:
        self.release.wait(timeout=5)
        return AdapterOutput(logs=["late"])


class ExplodingAuthService(AuthorizationService):
    def authorize(self, task) -> bool:
        raise ConnectionError("auth service unreachable")


def _service(repository, pool, adapters, auth=None, deadline=5.0) -> ScanTaskService:
    dispatcher = ScanDispatcher(
        adapters,
        AuthorizationGate(auth or StaticAuthorizationService(allow=True)),
        pool,
        deadline=deadline,
    )
    return ScanTaskService(repository, dispatcher, poll_interval=0.0)


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def service(repository, worker_pool, adapter) -> ScanTaskService:
    return _service(repository, worker_pool, {Protocol.HTTPS: adapter, Protocol.HTTP: adapter})


class TestSubmit:
    """Intake of new tasks."""

    def test_valid_request_is_pending(self, service, repository, make_request, adapter):
        response = service.submit(make_request(scan_task_id="t-1"))

        assert response.status == TaskStatus.PENDING
        assert response.scan_task_id == "t-1"
        assert repository.find_task_status("t-1")[0] == TaskStatus.PENDING
        assert adapter.calls == []

    def test_blank_id_gets_generated(self, service, make_request):
        response = service.submit(make_request(scan_task_id=" "))

        assert response.status == TaskStatus.PENDING
        assert len(response.scan_task_id) == 36

    def test_invalid_request_is_persisted_for_audit(self, service, repository, make_request):
        response = service.submit(make_request(scan_task_id="t-2", scanning_depth=0))

        assert response.status == TaskStatus.INVALID
        assert response.is_error
        assert "Scanning depth" in response.message
        assert repository.find_task_status("t-2")[0] == TaskStatus.INVALID

    def test_url_mismatch_is_invalid(self, service, make_request):
        response = service.submit(
            make_request(target_urls=["ftp://a.test"], protocol_types=["HTTPS"])
        )

        assert response.status == TaskStatus.INVALID
        assert "ftp://a.test" in response.message

    def test_past_start_time_is_invalid(self, service, make_request):
        start = (utc_now() - timedelta(hours=1)).isoformat()

        response = service.submit(make_request(start_time=start))

        assert response.status == TaskStatus.INVALID
        assert response.message == "Start time cannot be in the past"

    def test_unparseable_start_time_is_invalid(self, service, make_request):
        response = service.submit(make_request(start_time="tomorrow-ish"))

        assert response.status == TaskStatus.INVALID

    def test_unknown_protocol_is_invalid(self, service, make_request):
        response = service.submit(make_request(protocol_types=["gopher"]))

        assert response.status == TaskStatus.INVALID
        assert "gopher" in response.message

    def test_bad_credentials_scheme_is_invalid(self, service, make_request):
        response = service.submit(make_request(credentials="Token abc"))

        assert response.status == TaskStatus.INVALID

    def test_missing_credentials_fail(self, service, repository, make_request):
        response = service.submit(make_request(scan_task_id="t-3", credentials=None))

        assert response.status == TaskStatus.FAILED
        assert "Invalid credentials" in response.message
        assert repository.find_task_status("t-3")[0] == TaskStatus.FAILED

    def test_auth_service_error_fails(self, repository, worker_pool, adapter, make_request):
        service = _service(
            repository, worker_pool, {Protocol.HTTPS: adapter}, auth=ExplodingAuthService()
        )

        response = service.submit(make_request())

        assert response.status == TaskStatus.FAILED
        assert "authorization service" in response.message
        assert "unreachable" not in response.message


class TestRun:
    """Synchronous execution of accepted tasks."""

    def test_submit_and_run_completes(self, service, repository, make_request, adapter):
        response = service.submit_and_run(
            make_request(scan_task_id="t-10", target_urls=["https://a.test", "https://b.test"])
        )

        assert response.status == TaskStatus.COMPLETED
        assert response.message.startswith("Scan completed with 2 findings.")
        assert repository.find_task_status("t-10")[0] == TaskStatus.COMPLETED
        results = repository.find_results_by_task_id("t-10")
        assert len(results) == 1
        assert results[0].execution_logs == ("scanned https://a.test", "scanned https://b.test")

    def test_config_carries_request_scope_and_poll_interval(self, service, make_request, adapter):
        service.submit_and_run(make_request(scope="wide", scanning_depth=4))

        _, config = adapter.calls[0]
        assert config.scope == "wide"
        assert config.depth == 4
        assert config.poll_interval == 0.0

    def test_run_pending_task_with_credentials(self, service, repository, make_request):
        service.submit(make_request(scan_task_id="t-11"))

        response = service.run("t-11", JwtCredential(TEST_TOKEN))

        assert response.status == TaskStatus.COMPLETED
        assert len(repository.find_results_by_task_id("t-11")) == 1

    def test_offset_start_time_survives_storage(self, service, repository, make_request):
        eastern = timezone(timedelta(hours=-5))
        start = (utc_now() + timedelta(hours=1)).astimezone(eastern)
        accepted = service.submit(
            make_request(scan_task_id="t-17", start_time=start.isoformat())
        )

        response = service.run("t-17", JwtCredential(TEST_TOKEN))

        assert accepted.status == TaskStatus.PENDING
        assert response.status == TaskStatus.COMPLETED, response.message
        assert repository.find_task_by_id("t-17").scheduling.start_time == start

    def test_stopped_pool_fails_the_task(self, repository, adapter, make_request):
        pool = WorkerPool(1)
        pool.shutdown()
        service = _service(repository, pool, {Protocol.HTTPS: adapter})

        response = service.submit_and_run(make_request(scan_task_id="t-18"))

        assert response.status == TaskStatus.FAILED
        assert "could not be dispatched" in response.message
        assert repository.find_task_status("t-18")[0] == TaskStatus.FAILED
        assert adapter.calls == []

    def test_run_without_credentials_fails(self, service, repository, make_request, adapter):
        service.submit(make_request(scan_task_id="t-12"))

        response = service.run("t-12")

        assert response.status == TaskStatus.FAILED
        assert adapter.calls == []
        assert repository.find_results_by_task_id("t-12") == []

    def test_run_unknown_task(self, service):
        response = service.run("missing")

        assert response.status == TaskStatus.FAILED
        assert "not found" in response.message

    def test_run_only_pending_tasks(self, service, make_request, adapter):
        service.submit_and_run(make_request(scan_task_id="t-13"))
        calls = len(adapter.calls)

        response = service.run("t-13", JwtCredential(TEST_TOKEN))

        assert response.status == TaskStatus.COMPLETED
        assert "not pending" in response.message
        assert len(adapter.calls) == calls

    def test_unauthorized_runs_nothing(self, repository, worker_pool, adapter, make_request):
        service = _service(
            repository,
            worker_pool,
            {Protocol.HTTPS: adapter},
            auth=StaticAuthorizationService(allow=False),
        )

        response = service.submit_and_run(make_request(scan_task_id="t-14"))

        assert response.status == TaskStatus.FAILED
        assert "Unauthorized" in response.message
        assert adapter.calls == []

    def test_timeout_fails_and_persists_nothing(self, repository, worker_pool, make_request):
        fast = FakeAdapter()
        slow = SlowAdapter()
        service = _service(
            repository,
            worker_pool,
            {Protocol.HTTP: fast, Protocol.HTTPS: slow},
            deadline=0.2,
        )
        request = make_request(
            scan_task_id="t-15",
            target_urls=["http://fast.test", "https://slow.test"],
            protocol_types=["HTTP", "HTTPS"],
        )

        try:
            response = service.submit_and_run(request)
        finally:
            slow.release.set()

        assert response.status == TaskStatus.FAILED
        assert "timeout" in response.message.lower()
        assert repository.find_results_by_task_id("t-15") == []
        assert repository.find_task_status("t-15")[0] == TaskStatus.FAILED

    def test_status_lookup(self, service, make_request):
        service.submit(make_request(scan_task_id="t-16"))

        response = service.status("t-16")

        assert response.status == TaskStatus.PENDING
        assert response.to_dict() == {
            "status": "PENDING",
            "scanTaskId": "t-16",
            "message": "Scan task t-16 accepted",
        }

    def test_status_unknown_task(self, service):
        assert service.status("missing").status == TaskStatus.FAILED
