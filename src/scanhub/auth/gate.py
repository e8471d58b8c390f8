"""Authorization gate in front of scan dispatch."""

import logging

from scanhub.errors import AuthServiceError, InvalidCredentialsError, UnauthorizedError
from scanhub.models import ScanTask

from .service import AuthorizationService

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """Single synchronous authorization check per task, no retries."""

    def __init__(self, service: AuthorizationService):
        self.service = service

    def authorize(self, task: ScanTask) -> None:
        """Raise unless the task is authorized to run."""
        if task.credentials is None:
            logger.warning("Task %s has no credentials", task.id)
            raise InvalidCredentialsError(f"Invalid credentials for scan task {task.id}")

        try:
            allowed = self.service.authorize(task)
        except Exception as exc:
            logger.error("Authorization service error for task %s: %s", task.id, exc)
            raise AuthServiceError(
                f"Failed to communicate with authorization service ({type(exc).__name__})"
            ) from exc

        if not allowed:
            logger.warning("Authorization denied for task %s", task.id)
            raise UnauthorizedError(f"Unauthorized scan attempt for task {task.id}")

        logger.info("Authorization granted for task %s", task.id)
