"""OWASP ZAP adapter driven through the ZAP JSON API."""

from typing import Any

from scanhub.models import Protocol, ScanConfig, Severity, Vulnerability

from .base import AdapterOutput, HttpScannerAdapter, parse_progress

_RISK_SEVERITY = {
    "3": Severity.HIGH,
    "2": Severity.MEDIUM,
    "1": Severity.LOW,
    "0": Severity.INFO,
    "high": Severity.HIGH,
    "medium": Severity.MEDIUM,
    "low": Severity.LOW,
    "informational": Severity.INFO,
}


def _severity_from_risk(alert: dict[str, Any]) -> Severity:
    risk = alert.get("riskcode", alert.get("risk", "0"))
    return _RISK_SEVERITY.get(str(risk).strip().lower(), Severity.INFO)


class ZapScannerAdapter(HttpScannerAdapter):
    """Spider, then active-scan, then collect alerts for one URL."""

    name = "zap"
    protocols = (Protocol.HTTP, Protocol.HTTPS)

    def _params(self, **params: Any) -> dict[str, Any]:
        if self.api_key:
            params["apikey"] = self.api_key
        return params

    def scan(self, url: str, config: ScanConfig) -> AdapterOutput:
        logs = [f"Starting ZAP scan for URL: {url}"]

        data = self._json(
            "GET",
            "JSON/spider/action/scan/",
            "spider",
            params=self._params(url=url, maxChildren=config.depth, recurse="true"),
        )
        spider_id = str(data.get("scan", ""))
        logs.append(f"Spider scan started with ID: {spider_id}")
        self._poll(
            lambda: self._status("spider", spider_id),
            "spider",
            config,
            logs,
            "Spider",
        )

        data = self._json(
            "GET",
            "JSON/ascan/action/scan/",
            "active_scan",
            params=self._params(url=url, recurse="true", inScopeOnly="false"),
        )
        ascan_id = str(data.get("scan", ""))
        logs.append(f"Active scan started with ID: {ascan_id}")
        self._poll(
            lambda: self._status("ascan", ascan_id),
            "active_scan",
            config,
            logs,
            "Active scan",
        )

        data = self._json(
            "GET",
            "JSON/core/view/alerts/",
            "alerts",
            params=self._params(baseurl=url, start=0, count=1000),
        )
        vulnerabilities = self._parse_alerts(data.get("alerts", []), url)
        logs.append(f"Found {len(vulnerabilities)} ZAP alerts")
        logs.append(f"Completed ZAP scan for URL: {url}")
        return AdapterOutput(logs=logs, vulnerabilities=vulnerabilities)

    def _status(self, component: str, scan_id: str) -> int:
        phase = "spider" if component == "spider" else "active_scan"
        data = self._json(
            "GET",
            f"JSON/{component}/view/status/",
            phase,
            params=self._params(scanId=scan_id),
        )
        return parse_progress(data.get("status", 0))

    def _parse_alerts(self, alerts: Any, url: str) -> list[Vulnerability]:
        if not isinstance(alerts, list):
            return []
        findings: list[Vulnerability] = []
        for alert in alerts:
            if not isinstance(alert, dict):
                continue
            name = str(alert.get("alert") or alert.get("name") or "ZAP alert").strip()
            findings.append(
                Vulnerability(
                    type=name,
                    severity=_severity_from_risk(alert),
                    description=str(alert.get("description") or "").strip(),
                    location=str(alert.get("url") or url),
                )
            )
        return findings
