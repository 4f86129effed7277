"""Factory for creating task stores based on configuration."""

from infrastructure.configuration.infrastructure.tasks import TaskSettings
from infrastructure.logging import get_module_logger
from infrastructure.tasks.dynamodb_store import DynamoDBTaskStore
from infrastructure.tasks.store import InMemoryTaskStore, TaskStore

logger = get_module_logger()


def create_task_store(settings: TaskSettings, backend: str | None = None) -> TaskStore:
    """Create the TaskStore selected by ``TASKS_BACKEND``.

    Args:
        settings: Task settings
        backend: Optional backend override (memory, dynamodb)

    Raises:
        ValueError: If an unknown backend is specified
    """
    backend = backend or settings.backend

    if backend == "memory":
        logger.info("creating_in_memory_task_store")
        return InMemoryTaskStore()

    if backend == "dynamodb":
        logger.info(
            "creating_dynamodb_task_store",
            table_name=settings.dynamodb_table_name,
        )
        return DynamoDBTaskStore(table_name=settings.dynamodb_table_name)

    raise ValueError(f"Unknown task backend: {backend}. Supported: memory, dynamodb")
