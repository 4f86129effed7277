"""Housekeeping for task records: expiry purge and stuck task recovery."""

from datetime import timedelta
from typing import Optional

from infrastructure.clock import Clock, SystemClock
from infrastructure.logging import get_module_logger
from infrastructure.tasks.lifecycle import TaskLifecycleManager
from infrastructure.tasks.models import TaskStatus
from infrastructure.tasks.store import TaskStore

logger = get_module_logger()

STUCK_TASK_MESSAGE = "Task was stuck in running state after server restart"
ABANDONED_TASK_MESSAGE = (
    "Task was never started and cannot be resumed after server restart"
)


class TaskMaintenance:
    """Periodic maintenance of the task store.

    Args:
        store: TaskStore holding the records
        manager: TaskLifecycleManager used to fail stuck tasks
        stuck_timeout_minutes: Running tasks not updated for longer are failed
        clock: Clock for the current time
    """

    def __init__(
        self,
        store: TaskStore,
        manager: TaskLifecycleManager,
        stuck_timeout_minutes: int = 10,
        clock: Optional[Clock] = None,
    ) -> None:
        self.store = store
        self.manager = manager
        self.stuck_timeout = timedelta(minutes=stuck_timeout_minutes)
        self.clock = clock or SystemClock()

    def purge_expired(self) -> int:
        """Delete every task whose expires_at has passed."""
        deleted = self.store.delete_expired(self.clock.now())
        logger.info("task_purge_complete", deleted=deleted)
        return deleted

    def fail_stuck_tasks(self) -> int:
        """Fail tasks that stopped moving for longer than the stuck timeout.

        Translation work runs inside the process that accepted it, so after a
        restart nothing resumes a task. Running tasks are failed as stuck;
        pending and queued ones as abandoned.
        """
        cutoff = self.clock.now() - self.stuck_timeout
        failed = self._fail_stale([TaskStatus.RUNNING], cutoff, STUCK_TASK_MESSAGE)
        failed += self._fail_stale(
            [TaskStatus.PENDING, TaskStatus.QUEUED], cutoff, ABANDONED_TASK_MESSAGE
        )
        return failed

    def _fail_stale(self, statuses, cutoff, message: str) -> int:
        stale = self.store.find_many(statuses=statuses, updated_before=cutoff)
        failed = 0
        for task in stale:
            if self.manager.fail(task.id, message) is not None:
                failed += 1
        if stale:
            logger.warning(
                "stuck_tasks_failed",
                statuses=[status.value for status in statuses],
                found=len(stale),
                failed=failed,
                timeout_minutes=int(self.stuck_timeout.total_seconds() // 60),
            )
        return failed
