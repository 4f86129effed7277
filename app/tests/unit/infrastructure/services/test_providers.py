"""
Unit tests for dependency injection providers.

Tests cover:
- Singleton caching of settings, stores and the retry scheduler
- Wiring of the task manager and housekeeping service
- Per-shop orchestrator construction
- Dependency override pattern for FastAPI routes
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from infrastructure.configuration import Settings
from infrastructure.resilience.retry import (
    HandlerRegistrationError,
    InMemoryRetryStore,
    RetryScheduler,
)
from infrastructure.services import providers
from infrastructure.services.dependencies import SettingsDep, TaskManagerDep
from infrastructure.tasks import InMemoryTaskStore, TaskLifecycleManager
from integrations.shopify import ShopifyGraphQLGateway
from modules.translation import BulkTranslationOrchestrator, InMemoryTranslationMirror
from modules.webhooks.topics import KNOWN_TOPICS

pytestmark = pytest.mark.unit

CACHED_PROVIDERS = (
    providers.get_settings,
    providers.get_clock,
    providers.get_task_store,
    providers.get_task_manager,
    providers.get_task_maintenance,
    providers.get_retry_store,
    providers.get_retry_scheduler,
    providers.get_translation_mirror,
)


@pytest.fixture(autouse=True)
def clear_provider_caches():
    for provider in CACHED_PROVIDERS:
        provider.cache_clear()
    yield
    for provider in CACHED_PROVIDERS:
        provider.cache_clear()


class TestGetSettings:
    def test_returns_settings_instance(self):
        assert isinstance(providers.get_settings(), Settings)

    def test_returns_cached_instance(self):
        assert providers.get_settings() is providers.get_settings()

    def test_cache_can_be_cleared(self):
        first = providers.get_settings()
        providers.get_settings.cache_clear()
        assert providers.get_settings() is not first


class TestInfrastructureProviders:
    def test_memory_task_store_by_default(self):
        assert isinstance(providers.get_task_store(), InMemoryTaskStore)

    def test_task_manager_shares_store(self):
        manager = providers.get_task_manager()
        assert isinstance(manager, TaskLifecycleManager)
        assert manager.store is providers.get_task_store()

    def test_maintenance_uses_stuck_timeout(self):
        maintenance = providers.get_task_maintenance()
        assert maintenance.stuck_timeout == timedelta(
            minutes=providers.get_settings().tasks.stuck_timeout_minutes
        )

    def test_retry_scheduler_singleton(self):
        scheduler = providers.get_retry_scheduler()
        assert isinstance(scheduler, RetryScheduler)
        assert scheduler is providers.get_retry_scheduler()
        assert isinstance(scheduler.store, InMemoryRetryStore)

    def test_retry_scheduler_only_accepts_known_topics(self):
        registry = providers.get_retry_scheduler().registry
        with pytest.raises(HandlerRegistrationError):
            registry.register("orders/create", lambda payload, shop: None)
        assert "products/update" in KNOWN_TOPICS

    def test_memory_translation_mirror_by_default(self):
        assert isinstance(providers.get_translation_mirror(), InMemoryTranslationMirror)


class TestBuildTranslationOrchestrator:
    def test_orchestrator_bound_to_shop(self):
        provider = MagicMock()
        orchestrator = providers.build_translation_orchestrator(
            "demo.myshopify.com", provider
        )
        assert isinstance(orchestrator, BulkTranslationOrchestrator)
        assert isinstance(orchestrator.gateway, ShopifyGraphQLGateway)
        assert orchestrator.gateway.shop == "demo.myshopify.com"
        assert orchestrator.provider is provider
        assert orchestrator.task_manager is providers.get_task_manager()

    def test_not_cached(self):
        provider = MagicMock()
        first = providers.build_translation_orchestrator("a.myshopify.com", provider)
        second = providers.build_translation_orchestrator("a.myshopify.com", provider)
        assert first is not second


class TestDependencyOverridePattern:
    def test_settings_dep_override(self):
        app = FastAPI()

        @app.get("/config")
        def get_config(settings: SettingsDep) -> dict:
            return {"prefix": settings.PREFIX}

        mock_settings = MagicMock(spec=Settings)
        mock_settings.PREFIX = "test-"
        app.dependency_overrides[providers.get_settings] = lambda: mock_settings

        response = TestClient(app).get("/config")

        assert response.status_code == 200
        assert response.json() == {"prefix": "test-"}

    def test_task_manager_dep_override(self):
        app = FastAPI()
        manager = MagicMock(spec=TaskLifecycleManager)
        manager.get.return_value = None

        @app.get("/tasks/{task_id}")
        def read_task(task_id: str, task_manager: TaskManagerDep) -> dict:
            return {"found": task_manager.get(task_id) is not None}

        app.dependency_overrides[providers.get_task_manager] = lambda: manager

        response = TestClient(app).get("/tasks/t-1")

        assert response.json() == {"found": False}
        manager.get.assert_called_once_with("t-1")
