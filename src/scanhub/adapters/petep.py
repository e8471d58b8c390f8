"""PETEP adapter for FTP targets."""

from typing import Any

from scanhub.errors import ScanExecutionError
from scanhub.models import Protocol, ScanConfig, Severity, Vulnerability

from .base import AdapterOutput, HttpScannerAdapter, parse_progress


class PetepScannerAdapter(HttpScannerAdapter):
    """Run a passive PETEP interception session against an FTP URL."""

    name = "petep"
    protocols = (Protocol.FTP,)

    def __init__(self, *args: Any, intercept_mode: str = "passive", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.intercept_mode = intercept_mode

    def scan(self, url: str, config: ScanConfig) -> AdapterOutput:
        logs = [f"Starting PETEP scan for URL: {url}"]
        data = self._json(
            "POST",
            "api/sessions",
            "start",
            json={"target": url, "interceptMode": self.intercept_mode, "depth": config.depth},
        )
        session_id = str(data.get("sessionId") or "")
        if not session_id:
            raise ScanExecutionError(self.name, "start", "no session id in response")
        logs.append(f"PETEP session started with ID: {session_id}")

        latest: dict[str, Any] = {}

        def check() -> int:
            data = self._json("GET", f"api/sessions/{session_id}", "poll")
            latest.clear()
            latest.update(data)
            status = str(data.get("status", "")).lower()
            if status == "error":
                raise ScanExecutionError(
                    self.name, "poll", str(data.get("message") or "session error")
                )
            if status == "completed":
                return 100
            return min(99, parse_progress(data.get("progress", 0)))

        self._poll(check, "poll", config, logs, "Session")

        vulnerabilities = []
        for item in latest.get("findings") or []:
            if not isinstance(item, dict):
                continue
            try:
                severity = Severity.parse(item.get("severity") or "INFO")
            except ValueError:
                severity = Severity.INFO
            vulnerabilities.append(
                Vulnerability(
                    type=str(item.get("type") or "PETEP finding"),
                    severity=severity,
                    description=str(item.get("description") or ""),
                    location=str(item.get("location") or url),
                )
            )
        logs.append(f"Completed PETEP scan for URL: {url}")
        return AdapterOutput(logs=logs, vulnerabilities=vulnerabilities)
