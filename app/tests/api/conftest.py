"""Fixtures for API route tests.

Routes are mounted on a bare FastAPI app with the rate limiter installed;
lifespan startup is not run, so providers are injected through
dependency_overrides and ``app.state``.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import get_limiter, setup_rate_limiter
from api.router import api_router
from infrastructure.configuration import Settings
from infrastructure.configuration.integrations import ShopifySettings
from infrastructure.services.providers import (
    get_retry_scheduler,
    get_settings,
    get_task_manager,
)

WEBHOOK_SECRET = "shpss_test_secret"


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter = get_limiter()
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def api_settings():
    return Settings(
        GIT_SHA="abc123",
        shopify=ShopifySettings(SHOPIFY_API_SECRET=WEBHOOK_SECRET),
    )


@pytest.fixture
def translation_provider():
    return MagicMock()


@pytest.fixture
def app(api_settings, task_manager, retry_scheduler, translation_provider):
    application = FastAPI()
    setup_rate_limiter(application)
    application.include_router(api_router)
    application.state.translation_provider = translation_provider
    application.dependency_overrides[get_settings] = lambda: api_settings
    application.dependency_overrides[get_task_manager] = lambda: task_manager
    application.dependency_overrides[get_retry_scheduler] = lambda: retry_scheduler
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
