"""Retry ledger models.

A ledger entry records one failed webhook delivery awaiting redelivery. The
payload is kept as an opaque serialized string; only the scheduler
deserializes it right before invoking the topic handler.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RetryLedgerEntry:
    """Failed delivery awaiting redelivery.

    Fields:
        shop: Shop domain the delivery belongs to
        topic: Webhook topic used to look up the handler
        payload: Serialized (JSON) payload
        next_retry: Earliest time the entry may be redelivered
        id: Entry identifier
        attempt: Failed redeliveries so far (starts at 0)
        max_attempts: Redeliveries allowed before the entry is dropped
        last_error: Message of the most recent failure
        created_at: When the original delivery failed
    """

    shop: str
    topic: str
    payload: str
    next_retry: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    attempt: int = 0
    max_attempts: int = 5
    last_error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.topic:
            raise ValueError("topic is required")
        if not isinstance(self.payload, str):
            raise ValueError("payload must be a serialized string")

    @property
    def is_exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shop": self.shop,
            "topic": self.topic,
            "payload": self.payload,
            "attempt": self.attempt,
            "max_attempts": self.max_attempts,
            "next_retry": self.next_retry.isoformat(),
            "last_error": self.last_error,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class DeadLetterEntry:
    """Copy of a ledger entry that will never be redelivered.

    Kept for operator inspection only.
    """

    entry: RetryLedgerEntry
    reason: str
    dead_lettered_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = self.entry.to_dict()
        data["reason"] = self.reason
        data["dead_lettered_at"] = self.dead_lettered_at.isoformat()
        return data
