"""Operation-scoped logging context.

Everything logged while a webhook is delivered or a bulk translation runs
carries the correlation id, shop and task id bound here. Scopes nest: an
inner scope inherits the outer correlation id and restores the outer values
when it exits.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(shop="demo.myshopify.com", task_id=task.id):
        logger.info("bulk_translation_started")
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    shop: Optional[str] = None,
    task_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind context to every log entry emitted inside the block.

    Args:
        correlation_id: Operation identifier. Defaults to the one already
            bound, or a new UUID.
        shop: Shop domain the operation belongs to.
        task_id: Task driven by the operation, if any.
        request_path: HTTP request path.
        request_method: HTTP method.
        **extra_context: Additional key-value pairs to include in logs.
    """
    optional = {
        "shop": shop,
        "task_id": task_id,
        "request_path": request_path,
        "request_method": request_method,
    }
    context = {key: value for key, value in optional.items() if value is not None}
    context.update(extra_context)
    context["correlation_id"] = (
        correlation_id or get_correlation_id() or str(uuid.uuid4())
    )

    tokens = structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def get_correlation_id() -> Optional[str]:
    return structlog.contextvars.get_contextvars().get("correlation_id")


def set_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_request_context() -> None:
    """Drop all bound context."""
    structlog.contextvars.clear_contextvars()
