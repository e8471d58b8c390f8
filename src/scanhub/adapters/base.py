"""Base contract for protocol scanner adapters."""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from scanhub.errors import ScanExecutionError
from scanhub.models import Protocol, ScanConfig, Vulnerability

logger = logging.getLogger(__name__)


@dataclass
class AdapterOutput:
    """Logs and findings produced by one adapter run against one URL."""

    logs: list[str] = field(default_factory=list)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)

    def extend(self, other: "AdapterOutput") -> None:
        self.logs.extend(other.logs)
        self.vulnerabilities.extend(other.vulnerabilities)


class ScannerAdapter(ABC):
    """Adapter interface for external scanning tools."""

    name: str
    protocols: tuple[Protocol, ...] = ()

    @abstractmethod
    def scan(self, url: str, config: ScanConfig) -> AdapterOutput:
        """Scan one URL. Raise ScanExecutionError on tool failure."""

    def close(self) -> None:
        """Release any client the adapter holds."""


class HttpScannerAdapter(ScannerAdapter):
    """Shared plumbing for tools driven through an HTTP API."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 120.0,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.api_key = api_key
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=30.0)
        self._sleep = sleep

    def _request(self, method: str, path: str, phase: str, **kwargs: Any) -> httpx.Response:
        url = self.base_url + path.lstrip("/")
        try:
            response = self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ScanExecutionError(
                self.name, phase, f"HTTP {exc.response.status_code} from {self.name} API"
            ) from exc
        except httpx.HTTPError as exc:
            raise ScanExecutionError(self.name, phase, f"{type(exc).__name__}: {exc}") from exc
        return response

    def _json(self, method: str, path: str, phase: str, **kwargs: Any) -> dict[str, Any]:
        response = self._request(method, path, phase, **kwargs)
        try:
            data = response.json()
        except ValueError as exc:
            raise ScanExecutionError(self.name, phase, "response is not valid JSON") from exc
        if not isinstance(data, dict):
            raise ScanExecutionError(self.name, phase, "unexpected response shape")
        return data

    def _poll(
        self,
        check: Callable[[], int],
        phase: str,
        config: ScanConfig,
        logs: list[str],
        label: str,
    ) -> None:
        """Call ``check`` until it reports 100 percent or the tool timeout passes."""
        started = time.monotonic()
        while True:
            progress = check()
            logs.append(f"{label} progress: {progress}%")
            if progress >= 100:
                return
            if time.monotonic() - started > self.timeout:
                raise ScanExecutionError(
                    self.name, phase, f"{label} did not finish within {self.timeout:g}s"
                )
            self._sleep(config.poll_interval)

    def close(self) -> None:
        self.client.close()


def parse_progress(value: Any) -> int:
    """Parse a percentage reported by a tool."""
    try:
        return int(str(value).strip().rstrip("%"))
    except ValueError:
        return 0
