"""Tests for assembling the engine from settings."""

from pathlib import Path

from scanhub.auth import HttpAuthorizationService, StaticAuthorizationService
from scanhub.config import Settings
from scanhub.engine import get_worker_pool, shutdown_worker_pool
from scanhub.models import Protocol
from scanhub.runtime import build_scanhub, create_auth_service


def test_auth_service_selection():
    remote = create_auth_service(Settings(auth_url="http://auth.test/check"))
    allow = create_auth_service(Settings(auth_allow_all=True))
    deny = create_auth_service(Settings())

    assert isinstance(remote, HttpAuthorizationService)
    assert isinstance(allow, StaticAuthorizationService) and allow.allow is True
    assert isinstance(deny, StaticAuthorizationService) and deny.allow is False
    remote.close()


def test_build_scanhub_wires_shared_pool(temp_dir: Path):
    settings = Settings(db_path=temp_dir / "hub.db", pool_size=2, scan_deadline=30)
    shutdown_worker_pool()
    try:
        hub = build_scanhub(settings)

        assert hub.dispatcher.pool is get_worker_pool(2)
        assert hub.dispatcher.deadline == 30
        assert set(hub.dispatcher.adapters) == {Protocol.HTTP, Protocol.HTTPS, Protocol.FTP}
        assert hub.tasks.repository is hub.repository
        assert (temp_dir / "hub.db").exists()
        hub.close()
    finally:
        shutdown_worker_pool()
