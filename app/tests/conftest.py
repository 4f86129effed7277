"""Shared fixtures for the test suite."""

import pytest

from infrastructure.resilience.retry import (
    HandlerRegistry,
    InMemoryRetryStore,
    RetryConfig,
    RetryScheduler,
)
from infrastructure.tasks import InMemoryTaskStore, TaskLifecycleManager
from tests.factories.retry import make_retry_entry
from tests.factories.tasks import make_task
from tests.fixtures.clock import FakeClock
from modules.webhooks.topics import KNOWN_TOPICS


@pytest.fixture
def clock():
    """Fake clock starting at 2025-01-15 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def task_store():
    return InMemoryTaskStore()


@pytest.fixture
def task_manager(task_store, clock):
    return TaskLifecycleManager(store=task_store, clock=clock)


@pytest.fixture
def task_factory():
    """Factory fixture building Task records."""
    return make_task


@pytest.fixture
def retry_store():
    return InMemoryRetryStore()


@pytest.fixture
def retry_config():
    return RetryConfig(max_attempts=5, delays_seconds=(1, 2, 4, 8, 16, 60))


@pytest.fixture
def retry_scheduler(retry_store, retry_config, clock):
    """Retry scheduler restricted to the supported webhook topics, not started."""
    return RetryScheduler(
        store=retry_store,
        registry=HandlerRegistry(known_topics=KNOWN_TOPICS),
        config=retry_config,
        clock=clock,
    )


@pytest.fixture
def retry_entry_factory():
    """Factory fixture building RetryLedgerEntry records."""
    return make_retry_entry
