"""Fixtures for server module unit tests."""

from unittest.mock import MagicMock

import pytest

from infrastructure.configuration import RetrySettings, Settings
from infrastructure.services import providers

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


@pytest.fixture
def mock_logger():
    return MagicMock()


@pytest.fixture
def settings_factory():
    def _factory(prefix: str = "", retry_enabled: bool = True) -> Settings:
        return Settings(
            PREFIX=prefix,
            retry=RetrySettings(RETRY_ENABLED=retry_enabled),
        )

    return _factory
