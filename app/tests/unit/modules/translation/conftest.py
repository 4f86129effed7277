"""Fixtures for bulk translation tests."""

from unittest.mock import MagicMock

import pytest

from modules.translation import BulkTranslationOrchestrator, InMemoryTranslationMirror
from tests.factories.translation import make_batch_translations
from tests.fixtures.translation import FakeGateway


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def provider():
    """Provider answering "<locale>:<source value>" for every request."""
    mock_provider = MagicMock()
    mock_provider.translate_batch.side_effect = (
        lambda fields, source_locale, target_locales: make_batch_translations(
            fields, target_locales
        )
    )
    mock_provider.translate_single_locale.side_effect = (
        lambda fields, target_locale, source_locale: {
            name: f"{target_locale}:{value}" for name, value in fields.items()
        }
    )
    return mock_provider


@pytest.fixture
def mirror():
    return InMemoryTranslationMirror()


@pytest.fixture
def orchestrator_factory(task_manager, gateway, provider, mirror):
    def _factory(**overrides):
        params = {
            "task_manager": task_manager,
            "gateway": gateway,
            "provider": provider,
            "mirror": mirror,
        }
        params.update(overrides)
        return BulkTranslationOrchestrator(**params)

    return _factory


@pytest.fixture
def orchestrator(orchestrator_factory):
    return orchestrator_factory()
