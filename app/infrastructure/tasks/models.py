"""Task record models.

A Task is the durable record of one long-running content operation
(generation or translation). It is created once and then mutated only
through TaskLifecycleManager.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

MAX_RESULT_LENGTH = 500
MAX_ERROR_LENGTH = 1000


class TaskStatus(str, Enum):
    """Task status values."""

    PENDING = "pending"
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskType(str, Enum):
    """Kinds of content operations tracked as tasks."""

    SINGLE_GENERATION = "single_generation"
    SINGLE_TRANSLATION = "single_translation"
    BULK_TRANSLATION = "bulk_translation"
    BULK_GENERATION = "bulk_generation"


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED})
ACTIVE_STATUSES = frozenset({TaskStatus.PENDING, TaskStatus.QUEUED, TaskStatus.RUNNING})


def clamp_progress(value: int) -> int:
    """Clamp a progress value into [0, 100]."""
    return max(0, min(100, int(value)))


def truncate_result(value: Optional[str]) -> Optional[str]:
    """Truncate a serialized result to MAX_RESULT_LENGTH characters."""
    if value is None:
        return None
    return value[:MAX_RESULT_LENGTH]


def truncate_error(value: Optional[str]) -> Optional[str]:
    """Truncate an error message to MAX_ERROR_LENGTH characters."""
    if value is None:
        return None
    return value[:MAX_ERROR_LENGTH]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Task:
    """Unit-of-work record for a long-running operation.

    Fields:
        id: Task identifier (UUID string)
        shop: Shop domain the task belongs to
        type: TaskType of the operation
        status: Current TaskStatus
        resource_type: Kind of resource being processed (e.g. "product")
        resource_id: Identifier of the resource
        field_type: Field being processed, for single-field operations
        target_locale: Target locale, for single-locale operations
        progress: Percentage 0-100, non-decreasing within a run
        processed: Units of work finished so far
        total: Total units of work, when known
        estimated_work: Caller's estimate of units of work, informational
        result: Serialized result (<= 500 chars), only when completed
        error: Error message (<= 1000 chars), only when failed
        expires_at: When housekeeping may purge the record
        created_at: Creation time
        updated_at: Last mutation time
    """

    id: str
    shop: str
    type: TaskType
    resource_id: str
    expires_at: datetime
    status: TaskStatus = TaskStatus.PENDING
    resource_type: str = "product"
    field_type: Optional[str] = None
    target_locale: Optional[str] = None
    progress: int = 0
    processed: Optional[int] = None
    total: Optional[int] = None
    estimated_work: Optional[int] = None
    result: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id is required")
        if not self.shop:
            raise ValueError("shop is required")
        if not self.resource_id:
            raise ValueError("resource_id is required")
        self.type = TaskType(self.type)
        self.status = TaskStatus(self.status)
        self.progress = clamp_progress(self.progress)
        self.result = truncate_result(self.result)
        self.error = truncate_error(self.error)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "shop": self.shop,
            "type": self.type.value,
            "status": self.status.value,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "field_type": self.field_type,
            "target_locale": self.target_locale,
            "progress": self.progress,
            "processed": self.processed,
            "total": self.total,
            "estimated_work": self.estimated_work,
            "result": self.result,
            "error": self.error,
            "expires_at": self.expires_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
