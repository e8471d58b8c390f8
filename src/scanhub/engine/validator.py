"""Structural and cross-field validation of scan tasks."""

import logging

from scanhub.errors import ValidationError
from scanhub.models import MAX_DEPTH, ScanTask

logger = logging.getLogger(__name__)


class TaskValidator:
    """Fail-fast validator; the first broken rule is reported.

    ``validate`` returns the error instead of raising it: an invalid task is an
    expected outcome for callers, not a fault.
    """

    def __init__(self, max_depth: int = MAX_DEPTH):
        self.max_depth = max_depth

    def validate(self, task: ScanTask | None) -> ValidationError | None:
        """Return the first validation error for a task, or None when valid."""
        error = self._check(task)
        if error is not None:
            logger.debug(
                "Task %s failed validation on %s: %s",
                getattr(task, "id", None),
                error.field,
                error.message,
            )
        return error

    def _check(self, task: ScanTask | None) -> ValidationError | None:
        if task is None:
            return ValidationError("task", None, "Scan task cannot be null")

        if not task.id or not task.id.strip():
            return ValidationError("id", task.id, "Scan task ID is required")

        if not task.target_urls:
            return ValidationError("target_urls", [], "At least one target URL is required")

        if not task.protocol_types:
            return ValidationError(
                "protocol_types", [], "At least one protocol type is required"
            )

        depth = task.scanning_depth
        if not isinstance(depth, int) or depth <= 0 or depth > self.max_depth:
            return ValidationError(
                "scanning_depth",
                depth,
                f"Scanning depth must be between 1 and {self.max_depth}, got {depth}",
            )

        if task.scheduling is None or task.scheduling.start_time is None:
            return ValidationError(
                "scheduling_metadata", None, "Scheduling metadata is required"
            )

        if task.scheduling.is_before(task.created_at):
            return ValidationError(
                "scheduling_metadata.start_time",
                task.scheduling.start_time.isoformat(),
                "Start time cannot be in the past",
            )

        for url in task.target_urls:
            if not task.matching_protocols(url):
                declared = ", ".join(p.name for p in task.protocol_types)
                return ValidationError(
                    "target_urls",
                    url,
                    f"URL {url} does not match any declared protocol ({declared})",
                )

        return None
