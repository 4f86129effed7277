"""Task subsystem exceptions."""


class TaskError(Exception):
    """Base exception for task tracking errors."""


class TaskNotFoundError(TaskError):
    """Raised when a task id does not exist."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class TaskPersistenceError(TaskError):
    """Raised when the task store cannot persist a change."""

    def __init__(self, message: str, error_code: str | None = None):
        self.error_code = error_code
        super().__init__(message)
