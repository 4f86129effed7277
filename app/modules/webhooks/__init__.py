"""Webhook intake: signature verification, topic handlers and delivery.

Failed deliveries are handed to the retry scheduler for redelivery.
"""

from modules.webhooks.delivery import deliver_webhook
from modules.webhooks.handlers import register_default_handlers
from modules.webhooks.models import DeliveryStatus, WebhookResult
from modules.webhooks.topics import KNOWN_TOPICS, WebhookTopic
from modules.webhooks.verification import compute_signature, verify_signature

__all__ = [
    "KNOWN_TOPICS",
    "DeliveryStatus",
    "WebhookResult",
    "WebhookTopic",
    "compute_signature",
    "deliver_webhook",
    "register_default_handlers",
    "verify_signature",
]
