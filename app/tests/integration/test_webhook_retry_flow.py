"""Webhook intake through redelivery: signature check, failed delivery,
retry ledger, scheduler passes and dead letters."""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import get_limiter, setup_rate_limiter
from api.router import api_router
from infrastructure.configuration import Settings
from infrastructure.configuration.integrations import ShopifySettings
from infrastructure.services.providers import get_retry_scheduler, get_settings
from modules.webhooks.verification import compute_signature

pytestmark = pytest.mark.integration

SECRET = "shpss_integration"
SHOP = "demo.myshopify.com"


@pytest.fixture
def client(retry_scheduler):
    get_limiter().reset()
    app = FastAPI()
    setup_rate_limiter(app)
    app.include_router(api_router)
    settings = Settings(shopify=ShopifySettings(SHOPIFY_API_SECRET=SECRET))
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_retry_scheduler] = lambda: retry_scheduler
    return TestClient(app)


def _send(client, topic, payload):
    body = json.dumps(payload).encode("utf-8")
    return client.post(
        "/api/v1/webhooks",
        content=body,
        headers={
            "X-Shopify-Hmac-Sha256": compute_signature(body, SECRET),
            "X-Shopify-Topic": topic,
            "X-Shopify-Shop-Domain": SHOP,
        },
    )


class TestWebhookRetryFlow:
    def test_redelivered_after_two_failures(self, client, retry_scheduler, clock):
        calls = []

        def flaky_handler(payload, shop):
            calls.append(payload)
            if len(calls) <= 2:
                raise RuntimeError(f"failure {len(calls)}")

        retry_scheduler.register_handler("products/update", flaky_handler)

        response = _send(client, "products/update", {"id": 1})
        assert response.json()["status"] == "retry_scheduled"
        entry_id = response.json()["retry_entry_id"]

        assert client.get("/api/v1/retries/stats").json()["total"] == 1

        clock.advance(seconds=1)
        assert retry_scheduler.run_once()["rescheduled"] == 1
        assert retry_scheduler.store.get(entry_id).attempt == 1

        clock.advance(seconds=2)
        assert retry_scheduler.run_once()["succeeded"] == 1

        assert retry_scheduler.store.get(entry_id) is None
        assert client.get("/api/v1/retries/stats").json()["total"] == 0
        assert len(calls) == 3

    def test_exhausted_delivery_is_dead_lettered(self, client, retry_scheduler, clock):
        def always_failing(payload, shop):
            raise RuntimeError("permanently broken")

        retry_scheduler.register_handler("products/delete", always_failing)
        _send(client, "products/delete", {"id": 9})

        for _ in range(retry_scheduler.config.max_attempts):
            clock.advance(minutes=5)
            retry_scheduler.run_once()

        assert retry_scheduler.get_stats()["total"] == 0
        dead_letters = retry_scheduler.store.list_dead_letters()
        assert len(dead_letters) == 1
        assert dead_letters[0].entry.shop == SHOP
