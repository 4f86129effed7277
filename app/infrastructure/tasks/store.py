"""Task record storage.

Protocol-based storage for Task records with an in-memory implementation for
development and tests. The DynamoDB implementation lives in dynamodb_store.
"""

import dataclasses
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol

from infrastructure.logging import get_module_logger
from infrastructure.tasks.errors import TaskNotFoundError, TaskPersistenceError
from infrastructure.tasks.models import Task, TaskStatus

logger = get_module_logger()

UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "progress",
        "processed",
        "total",
        "result",
        "error",
        "updated_at",
    }
)


class TaskStore(Protocol):
    """Storage interface for Task records.

    Methods:
        get: Return a task by id, or None
        create: Persist a new task
        update: Apply field changes, optionally guarded by the current status
        find_many: Return tasks matching simple filters
        delete: Remove a task
        delete_expired: Remove every task whose expires_at is in the past
    """

    def get(self, task_id: str) -> Optional[Task]:
        ...

    def create(self, task: Task) -> Task:
        """Persist a new task.

        Raises:
            TaskPersistenceError: If the task cannot be stored or already exists
        """
        ...

    def update(
        self,
        task_id: str,
        changes: Dict[str, Any],
        allowed_statuses: Optional[Iterable[TaskStatus]] = None,
    ) -> Optional[Task]:
        """Apply ``changes`` to a task.

        Args:
            task_id: Task identifier
            changes: Field name to new value; only UPDATABLE_FIELDS are accepted
            allowed_statuses: When given, the update only applies if the stored
                status is one of these

        Returns:
            The updated Task, or None when the status guard did not match

        Raises:
            TaskNotFoundError: If the task does not exist
            TaskPersistenceError: If the store cannot apply the change
        """
        ...

    def find_many(
        self,
        shop: Optional[str] = None,
        statuses: Optional[Iterable[TaskStatus]] = None,
        updated_before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        ...

    def delete(self, task_id: str) -> bool:
        ...

    def delete_expired(self, now: datetime) -> int:
        """Delete tasks with ``expires_at < now`` and return how many were removed."""
        ...


def validate_changes(changes: Dict[str, Any]) -> None:
    """Reject changes to fields the lifecycle never mutates."""
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")


class InMemoryTaskStore:
    """Thread-safe in-memory TaskStore.

    Suitable for single-instance deployments and tests. Records are copied on
    the way in and out so callers never share mutable state with the store.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()

    def get(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return dataclasses.replace(task) if task else None

    def create(self, task: Task) -> Task:
        with self._lock:
            if task.id in self._tasks:
                raise TaskPersistenceError(f"Task already exists: {task.id}")
            self._tasks[task.id] = dataclasses.replace(task)
            logger.debug("task_record_created", task_id=task.id)
            return dataclasses.replace(task)

    def update(
        self,
        task_id: str,
        changes: Dict[str, Any],
        allowed_statuses: Optional[Iterable[TaskStatus]] = None,
    ) -> Optional[Task]:
        validate_changes(changes)
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            if allowed_statuses is not None and task.status not in set(
                allowed_statuses
            ):
                return None
            updated = dataclasses.replace(task, **changes)
            self._tasks[task_id] = updated
            return dataclasses.replace(updated)

    def find_many(
        self,
        shop: Optional[str] = None,
        statuses: Optional[Iterable[TaskStatus]] = None,
        updated_before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        wanted = set(statuses) if statuses is not None else None
        with self._lock:
            matches = [
                dataclasses.replace(task)
                for task in self._tasks.values()
                if (shop is None or task.shop == shop)
                and (wanted is None or task.status in wanted)
                and (updated_before is None or task.updated_at < updated_before)
            ]
        matches.sort(key=lambda task: task.created_at)
        return matches[:limit] if limit is not None else matches

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [
                task_id
                for task_id, task in self._tasks.items()
                if task.expires_at < now
            ]
            for task_id in expired:
                del self._tasks[task_id]
        if expired:
            logger.info("expired_tasks_deleted", count=len(expired))
        return len(expired)
