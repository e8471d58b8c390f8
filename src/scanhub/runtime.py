"""Wire settings, storage, scanners and services together."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from scanhub.adapters import ScannerAdapter, create_default_adapters
from scanhub.auth import (
    AuthorizationGate,
    AuthorizationService,
    HttpAuthorizationService,
    StaticAuthorizationService,
)
from scanhub.config import Settings
from scanhub.db import ScanRepository
from scanhub.engine import ScanDispatcher, WorkerPool, get_worker_pool
from scanhub.models import Protocol
from scanhub.services import ScanResultService, ScanTaskService

logger = logging.getLogger(__name__)


@dataclass
class ScanHub:
    """The assembled engine: one repository, one dispatcher, two services."""

    settings: Settings
    repository: ScanRepository
    dispatcher: ScanDispatcher
    tasks: ScanTaskService
    results: ScanResultService

    def close(self) -> None:
        for adapter in {id(a): a for a in self.dispatcher.adapters.values()}.values():
            adapter.close()
        service = self.dispatcher.gate.service
        if hasattr(service, "close"):
            service.close()
        self.repository.engine.dispose()


def create_auth_service(settings: Settings) -> AuthorizationService:
    """Remote service when configured, otherwise a fixed allow/deny answer."""
    if settings.auth_url:
        return HttpAuthorizationService(settings.auth_url)
    if not settings.auth_allow_all:
        logger.warning("No SCANHUB_AUTH_URL configured; every scan will be denied")
    return StaticAuthorizationService(allow=settings.auth_allow_all)


def build_scanhub(
    settings: Settings,
    adapters: Mapping[Protocol, ScannerAdapter] | None = None,
    auth_service: AuthorizationService | None = None,
    pool: WorkerPool | None = None,
) -> ScanHub:
    repository = ScanRepository.from_path(settings.db_path)
    dispatcher = ScanDispatcher(
        adapters=adapters if adapters is not None else create_default_adapters(settings),
        gate=AuthorizationGate(auth_service or create_auth_service(settings)),
        pool=pool or get_worker_pool(settings.pool_size),
        deadline=settings.scan_deadline,
    )
    return ScanHub(
        settings=settings,
        repository=repository,
        dispatcher=dispatcher,
        tasks=ScanTaskService(repository, dispatcher, poll_interval=settings.poll_interval),
        results=ScanResultService(repository),
    )
