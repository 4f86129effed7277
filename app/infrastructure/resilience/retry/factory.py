"""Factory for creating retry stores based on configuration."""

from infrastructure.configuration.infrastructure.retry import RetrySettings
from infrastructure.logging import get_module_logger
from infrastructure.resilience.retry.dynamodb_store import DynamoDBRetryStore
from infrastructure.resilience.retry.store import InMemoryRetryStore, RetryStore

logger = get_module_logger()


def create_retry_store(
    settings: RetrySettings, backend: str | None = None
) -> RetryStore:
    """Factory to create the retry store selected by ``RETRY_BACKEND``.

    Args:
        settings: Retry settings
        backend: Optional backend override (memory, dynamodb)

    Returns:
        Appropriate RetryStore implementation

    Raises:
        ValueError: If unknown backend specified

    Examples:
        >>> store = create_retry_store(settings.retry)  # Uses RETRY_BACKEND
        >>> store = create_retry_store(settings.retry, backend="memory")
    """
    backend = backend or settings.backend

    if backend == "memory":
        logger.info("creating_in_memory_retry_store")
        return InMemoryRetryStore()

    elif backend == "dynamodb":
        logger.info(
            "creating_dynamodb_retry_store",
            table_name=settings.dynamodb_table_name,
        )
        return DynamoDBRetryStore(
            table_name=settings.dynamodb_table_name,
            dead_letter_table_name=settings.dead_letter_table_name,
            ttl_days=settings.retention_days,
        )

    else:
        raise ValueError(
            f"Unknown retry backend: {backend}. Supported: memory, dynamodb"
        )
