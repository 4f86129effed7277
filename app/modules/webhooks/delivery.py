"""Delivery of verified webhooks to their topic handlers.

A handler failure never reaches the sender: the delivery is recorded in the
retry ledger and redelivered by the retry scheduler.
"""

from typing import Any

from infrastructure.logging import bind_request_context, get_module_logger
from infrastructure.resilience.retry import RetryScheduler
from modules.webhooks.models import DeliveryStatus, WebhookResult

logger = get_module_logger()


def deliver_webhook(
    scheduler: RetryScheduler, shop: str, topic: str, payload: Any
) -> WebhookResult:
    """Invoke the handler registered for ``topic``.

    Args:
        scheduler: Retry scheduler owning the handler registry and ledger
        shop: Shop domain that sent the webhook
        topic: Webhook topic
        payload: Decoded webhook body

    Returns:
        WebhookResult describing whether the delivery succeeded, was handed
        to the retry ledger, or had no handler.
    """
    with bind_request_context(shop=shop, topic=topic):
        handler = scheduler.registry.get(topic)
        if handler is None:
            logger.warning("webhook_topic_unhandled")
            return WebhookResult(
                status=DeliveryStatus.UNHANDLED,
                topic=topic,
                shop=shop,
                message=f"No handler registered for {topic}",
            )

        try:
            handler(payload, shop)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("webhook_delivery_failed", error=str(e))
            entry_id = scheduler.schedule_retry(shop, topic, payload, e)
            return WebhookResult(
                status=DeliveryStatus.RETRY_SCHEDULED,
                topic=topic,
                shop=shop,
                retry_entry_id=entry_id,
                message=str(e),
            )

        logger.info("webhook_delivered")
        return WebhookResult(status=DeliveryStatus.DELIVERED, topic=topic, shop=shop)
