"""Factory functions for task test data."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from infrastructure.tasks import Task, TaskStatus, TaskType
from infrastructure.tasks.dynamodb_store import task_to_item


def make_task(
    task_id: Optional[str] = None,
    shop: str = "example.myshopify.com",
    task_type: TaskType = TaskType.BULK_TRANSLATION,
    resource_id: str = "gid://shopify/Product/1",
    status: TaskStatus = TaskStatus.PENDING,
    progress: int = 0,
    created_at: Optional[datetime] = None,
    updated_at: Optional[datetime] = None,
    expires_at: Optional[datetime] = None,
    **overrides: Any,
) -> Task:
    """Create a Task with sensible defaults.

    Args:
        task_id: Task id (random UUID when omitted)
        shop: Shop domain
        task_type: TaskType
        resource_id: Resource identifier
        status: Initial status
        progress: Initial progress
        created_at: Creation time (defaults to 2025-01-15 12:00 UTC)
        updated_at: Last update time (defaults to created_at)
        expires_at: Expiry (defaults to created_at + 3 days)
        **overrides: Any other Task field

    Returns:
        Task instance
    """
    created = created_at or datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
    return Task(
        id=task_id or str(uuid.uuid4()),
        shop=shop,
        type=task_type,
        resource_id=resource_id,
        status=status,
        progress=progress,
        created_at=created,
        updated_at=updated_at or created,
        expires_at=expires_at or created + timedelta(days=3),
        **overrides,
    )


def make_task_item(**kwargs: Any) -> Dict[str, Any]:
    """Create a DynamoDB item for a task built by make_task()."""
    return task_to_item(make_task(**kwargs))
