"""Webhook delivery models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    RETRY_SCHEDULED = "retry_scheduled"
    UNHANDLED = "unhandled"


class WebhookResult(BaseModel):
    """Outcome of one webhook delivery."""

    model_config = ConfigDict(extra="forbid")

    status: DeliveryStatus
    topic: str
    shop: str
    retry_entry_id: Optional[str] = None
    message: Optional[str] = None
