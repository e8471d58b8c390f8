"""Task intake and synchronous execution."""

import dataclasses
import logging
import uuid
from datetime import datetime

from scanhub.db import ScanRepository
from scanhub.engine import ScanDispatcher
from scanhub.errors import (
    AuthServiceError,
    PersistenceError,
    ScanHubError,
    TaskNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from scanhub.models import (
    Credential,
    ScanConfig,
    ScanConfigBuilder,
    ScanTask,
    ScanTaskRequest,
    ScanTaskResponse,
    SchedulingMetadata,
    TaskStatus,
    credential_from_header,
    utc_now,
)
from scanhub.models.task import DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)


class ScanTaskService:
    """Accept scan requests and drive them through the task state machine.

    PENDING -> IN_PROGRESS -> COMPLETED | FAILED | INVALID
    """

    def __init__(
        self,
        repository: ScanRepository,
        dispatcher: ScanDispatcher,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.repository = repository
        self.dispatcher = dispatcher
        self.poll_interval = poll_interval

    def build_task(self, request: ScanTaskRequest) -> ScanTask:
        """Turn a raw request into a task. Raises ValidationError on malformed input."""
        task_id = (request.scan_task_id or "").strip() or str(uuid.uuid4())
        created_at = utc_now()
        try:
            protocols = tuple(request.protocol_types or ())
            config = self._config(request.scanning_depth, protocols, request.scope)
        except ValueError as exc:
            raise ValidationError("protocol_types", request.protocol_types, str(exc)) from None

        return ScanTask(
            id=task_id,
            target_urls=tuple(request.target_urls or ()),
            scanning_depth=request.scanning_depth,
            protocol_types=protocols,
            scheduling=self._scheduling(request.start_time, created_at),
            credentials=credential_from_header(request.credentials),
            created_at=created_at,
            config=config,
        )

    def submit(self, request: ScanTaskRequest) -> ScanTaskResponse:
        response, _ = self._accept(request)
        return response

    def run(self, task_id: str, credentials: Credential | None = None) -> ScanTaskResponse:
        """Execute a PENDING task and persist its result.

        Stored tasks never carry secrets, so ``credentials`` must be supplied
        again for authorization to pass.
        """
        try:
            task = self.repository.find_task_by_id(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            status = self.repository.find_task_status(task_id)
        except ScanHubError as exc:
            return ScanTaskResponse(TaskStatus.FAILED, task_id, exc.message)

        if status is not None and status[0] != TaskStatus.PENDING:
            return ScanTaskResponse(
                status[0],
                task_id,
                f"Scan task {task_id} is not pending (status {status[0].value})",
            )

        task = dataclasses.replace(
            task,
            credentials=credentials,
            config=self._config(task.scanning_depth, task.protocol_types, task.config.scope),
        )
        return self._execute(task)

    def submit_and_run(self, request: ScanTaskRequest) -> ScanTaskResponse:
        response, task = self._accept(request)
        if task is None or response.status != TaskStatus.PENDING:
            return response
        return self._execute(task)

    def status(self, task_id: str) -> ScanTaskResponse:
        try:
            found = self.repository.find_task_status(task_id)
        except PersistenceError as exc:
            return ScanTaskResponse(TaskStatus.FAILED, task_id, exc.message)
        if found is None:
            return ScanTaskResponse(TaskStatus.FAILED, task_id, TaskNotFoundError(task_id).message)
        status, message = found
        return ScanTaskResponse(status, task_id, message)

    def _accept(self, request: ScanTaskRequest) -> tuple[ScanTaskResponse, ScanTask | None]:
        fallback_id = request.scan_task_id or ""
        try:
            task = self.build_task(request)
        except ValidationError as exc:
            logger.info("Rejected malformed scan request: %s", exc.message)
            return ScanTaskResponse(TaskStatus.INVALID, fallback_id, exc.message), None

        try:
            error = self.dispatcher.validator.validate(task)
            if error is not None:
                logger.info("Scan task %s invalid (%s): %s", task.id, error.field, error.message)
                self.repository.save_task(task, TaskStatus.INVALID, error.message)
                return ScanTaskResponse(TaskStatus.INVALID, task.id, error.message), task

            try:
                self.dispatcher.gate.authorize(task)
            except (UnauthorizedError, AuthServiceError) as exc:
                logger.warning("Scan task %s not authorized: %s", task.id, exc.message)
                self.repository.save_task(task, TaskStatus.FAILED, exc.message)
                return ScanTaskResponse(TaskStatus.FAILED, task.id, exc.message), task

            message = f"Scan task {task.id} accepted"
            self.repository.save_task(task, TaskStatus.PENDING, message)
        except PersistenceError as exc:
            return ScanTaskResponse(TaskStatus.FAILED, task.id, exc.message), task

        logger.info("Accepted scan task %s (%d URLs)", task.id, len(task.target_urls))
        return ScanTaskResponse(TaskStatus.PENDING, task.id, message), task

    def _execute(self, task: ScanTask) -> ScanTaskResponse:
        try:
            self.repository.update_task_status(task.id, TaskStatus.IN_PROGRESS, "Scan started")
            result = self.dispatcher.dispatch(task)
            self.repository.save_result(result)
        except ValidationError as exc:
            return self._finish(task.id, TaskStatus.INVALID, exc.message)
        except ScanHubError as exc:
            return self._finish(task.id, TaskStatus.FAILED, exc.message)
        except RuntimeError as exc:
            logger.exception("Scan task %s could not be dispatched", task.id)
            return self._finish(
                task.id, TaskStatus.FAILED, f"Scan could not be dispatched: {exc}"
            )

        return self._finish(task.id, TaskStatus.COMPLETED, result.summary())

    def _finish(self, task_id: str, status: TaskStatus, message: str) -> ScanTaskResponse:
        if status == TaskStatus.COMPLETED:
            logger.info("Scan task %s completed: %s", task_id, message)
        else:
            logger.warning("Scan task %s %s: %s", task_id, status.value.lower(), message)
        try:
            self.repository.update_task_status(task_id, status, message)
        except PersistenceError as exc:
            logger.error("Could not record final status for task %s: %s", task_id, exc.message)
            return ScanTaskResponse(TaskStatus.FAILED, task_id, exc.message)
        return ScanTaskResponse(status, task_id, message)

    def _config(self, depth: int, protocols, scope: str) -> ScanConfig:
        return (
            ScanConfigBuilder()
            .depth(depth)
            .protocols(protocols)
            .scope(scope or "strict")
            .poll_interval(self.poll_interval)
            .build()
        )

    @staticmethod
    def _scheduling(
        start_time: datetime | str | None, created_at: datetime
    ) -> SchedulingMetadata:
        """No start time means start immediately."""
        if start_time is None or start_time == "":
            return SchedulingMetadata(created_at)
        if isinstance(start_time, datetime):
            return SchedulingMetadata.parse(start_time.isoformat())
        try:
            return SchedulingMetadata.parse(start_time)
        except ValueError:
            raise ValidationError(
                "scheduling_metadata.start_time", start_time, f"Invalid start time: {start_time}"
            ) from None
