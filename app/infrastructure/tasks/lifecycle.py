"""Task lifecycle management.

TaskLifecycleManager is the only writer of Task records. It enforces the
state machine:

    pending → queued → running → completed | failed
    running → queued (requeue)
    any non-terminal status → completed | failed

- progress never decreases within a run and is forced to 100 on completion
- result is set only on completion, error only on failure
- completed and failed are terminal: later mutations are ignored and logged
- complete() and fail() never raise because of persistence failures
"""

import json
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from infrastructure.clock import Clock, SystemClock
from infrastructure.logging import get_module_logger
from infrastructure.tasks.errors import TaskError, TaskNotFoundError
from infrastructure.tasks.models import (
    ACTIVE_STATUSES,
    Task,
    TaskStatus,
    TaskType,
    clamp_progress,
    truncate_error,
    truncate_result,
)
from infrastructure.tasks.store import TaskStore

logger = get_module_logger()

ExpirationPolicy = Callable[[datetime], datetime]

DEFAULT_EXPIRY_DAYS = 3


def expire_after(days: int) -> ExpirationPolicy:
    """Build an expiration policy placing expires_at ``days`` after creation."""

    def policy(created_at: datetime) -> datetime:
        return created_at + timedelta(days=days)

    return policy


def serialize_result(payload: Any) -> str:
    """Serialize a completion payload: strings as-is, everything else as JSON."""
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, default=str)


class TaskLifecycleManager:
    """Creates tasks and drives their status transitions.

    Args:
        store: TaskStore used for persistence
        clock: Clock for timestamps (defaults to the system clock)
        expiration_policy: Maps creation time to expires_at (default 3 days)
    """

    def __init__(
        self,
        store: TaskStore,
        clock: Optional[Clock] = None,
        expiration_policy: Optional[ExpirationPolicy] = None,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.expiration_policy = expiration_policy or expire_after(
            DEFAULT_EXPIRY_DAYS
        )

    def create(
        self,
        shop: str,
        type: TaskType,  # pylint: disable=redefined-builtin
        resource_id: str,
        field_type: Optional[str] = None,
        target_locale: Optional[str] = None,
        estimated_work: Optional[int] = None,
        resource_type: str = "product",
    ) -> Task:
        """Create a pending task with progress 0.

        Raises:
            TaskPersistenceError: If the task cannot be stored
        """
        now = self.clock.now()
        task = Task(
            id=str(uuid.uuid4()),
            shop=shop,
            type=type,
            resource_id=resource_id,
            resource_type=resource_type,
            field_type=field_type,
            target_locale=target_locale,
            estimated_work=estimated_work,
            status=TaskStatus.PENDING,
            progress=0,
            expires_at=self.expiration_policy(now),
            created_at=now,
            updated_at=now,
        )
        created = self.store.create(task)
        logger.info(
            "task_created",
            task_id=created.id,
            shop=shop,
            task_type=created.type.value,
            resource_id=resource_id,
        )
        return created

    def get(self, task_id: str) -> Optional[Task]:
        return self.store.get(task_id)

    def mark_queued(
        self, task_id: str, initial_progress: int, total: Optional[int] = None
    ) -> Optional[Task]:
        """Move a pending or running task to queued.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        task = self._require(task_id)
        if task.is_terminal:
            self._log_ignored(task, "mark_queued")
            return None

        changes: Dict[str, Any] = {
            "status": TaskStatus.QUEUED,
            "progress": max(task.progress, clamp_progress(initial_progress)),
            "updated_at": self.clock.now(),
        }
        if total is not None:
            changes["total"] = total
        return self._apply(task, changes, "mark_queued")

    def set_progress(
        self,
        task_id: str,
        percent: int,
        processed: Optional[int] = None,
        total: Optional[int] = None,
    ) -> Optional[Task]:
        """Record progress, moving pending/queued tasks to running.

        Progress below the stored value is ignored so progress stays monotonic.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        task = self._require(task_id)
        if task.is_terminal:
            self._log_ignored(task, "set_progress")
            return None

        changes: Dict[str, Any] = {
            "progress": max(task.progress, clamp_progress(percent)),
            "updated_at": self.clock.now(),
        }
        if task.status != TaskStatus.RUNNING:
            changes["status"] = TaskStatus.RUNNING
            logger.info("task_running", task_id=task_id, previous=task.status.value)
        if processed is not None:
            changes["processed"] = processed
        if total is not None:
            changes["total"] = total
        return self._apply(task, changes, "set_progress")

    def complete(self, task_id: str, result_payload: Any) -> Optional[Task]:
        """Mark a task completed with progress 100 and a truncated result.

        Never raises: persistence failures are logged and swallowed.
        """
        try:
            task = self._require(task_id)
            if task.is_terminal:
                self._log_ignored(task, "complete")
                return None
            changes = {
                "status": TaskStatus.COMPLETED,
                "progress": 100,
                "result": truncate_result(serialize_result(result_payload)),
                "error": None,
                "updated_at": self.clock.now(),
            }
            updated = self._apply(task, changes, "complete")
            if updated is not None:
                logger.info("task_completed", task_id=task_id)
            return updated
        except (TaskError, TypeError, ValueError) as e:
            logger.error(
                "task_complete_persist_failed",
                task_id=task_id,
                error=str(e),
            )
            return None

    def fail(self, task_id: str, error_or_message: Any) -> Optional[Task]:
        """Mark a task failed with a truncated error message.

        Never raises: persistence failures are logged and swallowed.
        """
        message = str(error_or_message)
        try:
            task = self._require(task_id)
            if task.is_terminal:
                self._log_ignored(task, "fail")
                return None
            changes = {
                "status": TaskStatus.FAILED,
                "error": truncate_error(message),
                "result": None,
                "updated_at": self.clock.now(),
            }
            updated = self._apply(task, changes, "fail")
            if updated is not None:
                logger.warning("task_failed", task_id=task_id, error=message)
            return updated
        except TaskError as e:
            logger.error(
                "task_fail_persist_failed",
                task_id=task_id,
                error=str(e),
                original_error=message,
            )
            return None

    def _require(self, task_id: str) -> Task:
        task = self.store.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _apply(
        self, task: Task, changes: Dict[str, Any], operation: str
    ) -> Optional[Task]:
        updated = self.store.update(task.id, changes, allowed_statuses=ACTIVE_STATUSES)
        if updated is None:
            # Reached a terminal state between read and write
            self._log_ignored(task, operation)
        return updated

    def _log_ignored(self, task: Task, operation: str) -> None:
        logger.warning(
            "task_transition_ignored_terminal",
            task_id=task.id,
            status=task.status.value,
            operation=operation,
        )
