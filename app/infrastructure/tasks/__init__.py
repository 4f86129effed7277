"""Task tracking for long-running content operations.

Usage:
    from infrastructure.tasks import InMemoryTaskStore, TaskLifecycleManager, TaskType

    manager = TaskLifecycleManager(InMemoryTaskStore())
    task = manager.create(shop, TaskType.BULK_TRANSLATION, resource_id)
    manager.set_progress(task.id, calculate_progress(1, 3))
    manager.complete(task.id, {"processed_locales": 2})
"""

from infrastructure.tasks.errors import (
    TaskError,
    TaskNotFoundError,
    TaskPersistenceError,
)
from infrastructure.tasks.factory import create_task_store
from infrastructure.tasks.lifecycle import TaskLifecycleManager, expire_after
from infrastructure.tasks.maintenance import (
    ABANDONED_TASK_MESSAGE,
    STUCK_TASK_MESSAGE,
    TaskMaintenance,
)
from infrastructure.tasks.models import (
    MAX_ERROR_LENGTH,
    MAX_RESULT_LENGTH,
    TERMINAL_STATUSES,
    Task,
    TaskStatus,
    TaskType,
)
from infrastructure.tasks.progress import calculate_progress
from infrastructure.tasks.store import InMemoryTaskStore, TaskStore

__all__ = [
    "ABANDONED_TASK_MESSAGE",
    "MAX_ERROR_LENGTH",
    "MAX_RESULT_LENGTH",
    "STUCK_TASK_MESSAGE",
    "TERMINAL_STATUSES",
    "InMemoryTaskStore",
    "Task",
    "TaskError",
    "TaskLifecycleManager",
    "TaskMaintenance",
    "TaskNotFoundError",
    "TaskPersistenceError",
    "TaskStatus",
    "TaskStore",
    "TaskType",
    "calculate_progress",
    "create_task_store",
    "expire_after",
]
