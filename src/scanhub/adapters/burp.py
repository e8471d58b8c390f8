"""Burp Suite adapter driven through the Burp REST API."""

from typing import Any

from scanhub.errors import ScanExecutionError
from scanhub.models import Protocol, ScanConfig, Severity, Vulnerability

from .base import AdapterOutput, HttpScannerAdapter, parse_progress

_SEVERITY = {
    "high": Severity.HIGH,
    "medium": Severity.MEDIUM,
    "low": Severity.LOW,
    "info": Severity.INFO,
}


class BurpScannerAdapter(HttpScannerAdapter):
    """Crawl-and-audit one URL with Burp and map its issue events."""

    name = "burp"
    protocols = (Protocol.HTTP, Protocol.HTTPS)

    @property
    def _prefix(self) -> str:
        return f"{self.api_key}/v0.1" if self.api_key else "v0.1"

    def scan(self, url: str, config: ScanConfig) -> AdapterOutput:
        logs = [f"Starting Burp Suite scan for URL: {url}"]
        task_id = self._start(url, config)
        logs.append(f"Scan started with ID: {task_id}")

        latest: dict[str, Any] = {}

        def check() -> int:
            data = self._json("GET", f"{self._prefix}/scan/{task_id}", "poll")
            latest.clear()
            latest.update(data)
            status = str(data.get("scan_status", "")).lower()
            if status == "failed":
                raise ScanExecutionError(self.name, "poll", f"scan {task_id} reported failure")
            if status == "succeeded":
                return 100
            metrics = data.get("scan_metrics") or {}
            return min(99, parse_progress(metrics.get("crawl_and_audit_progress", 0)))

        self._poll(check, "poll", config, logs, "Scan")

        vulnerabilities = self._parse_issues(latest.get("issue_events", []), url)
        logs.append(f"Found {len(vulnerabilities)} Burp issues")
        logs.append(f"Completed Burp Suite scan for URL: {url}")
        return AdapterOutput(logs=logs, vulnerabilities=vulnerabilities)

    def _start(self, url: str, config: ScanConfig) -> str:
        payload = {
            "urls": [url],
            "scope": {
                "type": "SimpleScope",
                "include": [{"rule": url}] if config.scope == "strict" else [],
            },
        }
        response = self._request("POST", f"{self._prefix}/scan", "start", json=payload)
        task_id = response.headers.get("Location", "").strip().rstrip("/").rsplit("/", 1)[-1]
        if not task_id:
            raise ScanExecutionError(self.name, "start", "no scan id in response")
        return task_id

    def _parse_issues(self, events: Any, url: str) -> list[Vulnerability]:
        if not isinstance(events, list):
            return []
        findings: list[Vulnerability] = []
        for event in events:
            issue = event.get("issue") if isinstance(event, dict) else None
            if not isinstance(issue, dict):
                continue
            severity = _SEVERITY.get(str(issue.get("severity", "info")).lower(), Severity.INFO)
            origin = str(issue.get("origin") or "").rstrip("/")
            path = str(issue.get("path") or "")
            findings.append(
                Vulnerability(
                    type=str(issue.get("name") or "Burp issue"),
                    severity=severity,
                    description=str(issue.get("description") or "").strip(),
                    location=f"{origin}{path}" if origin else url,
                )
            )
        return findings
