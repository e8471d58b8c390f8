"""Intake and result services built on the engine and repository."""

from .results import ScanResultService
from .tasks import ScanTaskService

__all__ = ["ScanResultService", "ScanTaskService"]
