"""Unit tests for task store selection."""

from unittest.mock import patch

import pytest

from infrastructure.configuration import TaskSettings
from infrastructure.tasks import InMemoryTaskStore, create_task_store
from infrastructure.tasks.dynamodb_store import DynamoDBTaskStore

pytestmark = pytest.mark.unit


class TestCreateTaskStore:
    def test_memory_backend(self):
        store = create_task_store(TaskSettings(TASKS_BACKEND="memory"))
        assert isinstance(store, InMemoryTaskStore)

    def test_dynamodb_backend(self):
        settings = TaskSettings(
            TASKS_BACKEND="dynamodb", TASKS_DYNAMODB_TABLE_NAME="tasks-table"
        )
        with patch("infrastructure.tasks.dynamodb_store.dynamodb_next"):
            store = create_task_store(settings)
        assert isinstance(store, DynamoDBTaskStore)
        assert store.table_name == "tasks-table"

    def test_backend_override(self):
        settings = TaskSettings(TASKS_BACKEND="dynamodb")
        assert isinstance(create_task_store(settings, backend="memory"), InMemoryTaskStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown task backend"):
            create_task_store(TaskSettings(), backend="redis")
