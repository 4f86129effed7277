"""Shared fixtures for retry system tests."""

from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture
def retry_config_factory():
    """Factory for creating RetryConfig instances."""
    from infrastructure.resilience.retry import RetryConfig

    def _factory(**overrides) -> RetryConfig:
        values = {
            "max_attempts": 5,
            "delays_seconds": (1, 2, 4, 8, 16, 60),
            "batch_size": 10,
        }
        values.update(overrides)
        return RetryConfig(**values)

    return _factory


@pytest.fixture
def recording_handler():
    """Handler that fails a configurable number of times before succeeding."""

    class RecordingHandler:
        def __init__(self):
            self.calls = []
            self.failures_remaining = 0
            self.__name__ = "recording_handler"

        def __call__(self, payload, shop):
            self.calls.append((payload, shop))
            if self.failures_remaining > 0:
                self.failures_remaining -= 1
                raise RuntimeError("downstream unavailable")

    return RecordingHandler()


@pytest.fixture
def mock_dynamodb_next():
    """Patch dynamodb_next as seen by the DynamoDB retry store."""
    with patch(
        "infrastructure.resilience.retry.dynamodb_store.dynamodb_next",
        new=MagicMock(),
    ) as mock:
        yield mock
