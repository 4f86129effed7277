"""Fixtures for task tests."""

from unittest.mock import patch

import pytest


@pytest.fixture
def mock_dynamodb_next():
    """Patch the dynamodb_next module used by the DynamoDB task store."""
    with patch("infrastructure.tasks.dynamodb_store.dynamodb_next") as mock:
        yield mock
