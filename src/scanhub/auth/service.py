"""Authorization service collaborators."""

import logging
from abc import ABC, abstractmethod

import httpx

from scanhub.models import ScanTask

logger = logging.getLogger(__name__)


class AuthorizationService(ABC):
    """Decides whether a scan task may run."""

    @abstractmethod
    def authorize(self, task: ScanTask) -> bool:
        """Return True when the task is permitted to run."""


class StaticAuthorizationService(AuthorizationService):
    """Fixed answer for local runs and tests."""

    def __init__(self, allow: bool = True):
        self.allow = allow

    def authorize(self, task: ScanTask) -> bool:
        return self.allow


class HttpAuthorizationService(AuthorizationService):
    """Ask a remote auth service over HTTP.

    The service receives the task's ``Authorization`` header and a JSON
    description of the scan, and answers ``{"authorized": true|false}``.
    A 401/403 answer counts as a denial; any other non-2xx status or a
    transport error is raised to the caller.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self.url = url
        self.client = client or httpx.Client(timeout=timeout)

    def authorize(self, task: ScanTask) -> bool:
        headers = {}
        if task.credentials is not None:
            headers["Authorization"] = task.credentials.authorization_header()
        payload = {
            "scanTaskId": task.id,
            "targetUrls": list(task.target_urls),
            "protocolTypes": [p.name for p in task.protocol_types],
            "scanningDepth": task.scanning_depth,
        }
        response = self.client.post(self.url, json=payload, headers=headers)
        if response.status_code in (401, 403):
            logger.info("Auth service denied task %s (%s)", task.id, response.status_code)
            return False
        response.raise_for_status()
        data = response.json()
        return bool(data.get("authorized", False)) if isinstance(data, dict) else False

    def close(self) -> None:
        self.client.close()
