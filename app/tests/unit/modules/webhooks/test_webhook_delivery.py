"""Unit tests for webhook delivery and retry hand-off."""

import pytest

from modules.webhooks.delivery import deliver_webhook
from modules.webhooks.models import DeliveryStatus

pytestmark = pytest.mark.unit

SHOP = "demo.myshopify.com"


class TestDeliverWebhook:
    def test_delivered(self, retry_scheduler, retry_store):
        received = []
        retry_scheduler.register_handler(
            "products/update", lambda payload, shop: received.append((payload, shop))
        )

        result = deliver_webhook(retry_scheduler, SHOP, "products/update", {"id": 1})

        assert result.status == DeliveryStatus.DELIVERED
        assert received == [({"id": 1}, SHOP)]
        assert retry_store.get_stats()["total"] == 0

    def test_failure_schedules_retry(self, retry_scheduler, retry_store, clock):
        def failing_handler(payload, shop):
            raise RuntimeError("downstream unavailable")

        retry_scheduler.register_handler("products/update", failing_handler)

        result = deliver_webhook(retry_scheduler, SHOP, "products/update", {"id": 1})

        assert result.status == DeliveryStatus.RETRY_SCHEDULED
        assert result.retry_entry_id is not None
        assert result.message == "downstream unavailable"
        entry = retry_store.get(result.retry_entry_id)
        assert entry.shop == SHOP
        assert entry.topic == "products/update"
        assert entry.attempt == 0
        assert entry.last_error == "downstream unavailable"

    def test_unhandled_topic(self, retry_scheduler, retry_store):
        result = deliver_webhook(retry_scheduler, SHOP, "products/update", {"id": 1})

        assert result.status == DeliveryStatus.UNHANDLED
        assert result.retry_entry_id is None

    def test_result_serializes(self, retry_scheduler):
        retry_scheduler.register_handler("products/create", lambda payload, shop: None)

        result = deliver_webhook(retry_scheduler, SHOP, "products/create", {"id": 2})

        assert result.model_dump(mode="json") == {
            "status": "delivered",
            "topic": "products/create",
            "shop": SHOP,
            "retry_entry_id": None,
            "message": None,
        }
