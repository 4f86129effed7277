"""Unit tests for Task records."""

import pytest

from infrastructure.tasks import (
    MAX_ERROR_LENGTH,
    MAX_RESULT_LENGTH,
    TaskStatus,
    TaskType,
)

pytestmark = pytest.mark.unit


class TestTaskValidation:
    def test_requires_shop(self, task_factory):
        with pytest.raises(ValueError, match="shop"):
            task_factory(shop="")

    def test_requires_resource_id(self, task_factory):
        with pytest.raises(ValueError, match="resource_id"):
            task_factory(resource_id="")

    def test_coerces_string_enums(self, task_factory):
        task = task_factory(task_type="bulk_translation", status="running")
        assert task.type is TaskType.BULK_TRANSLATION
        assert task.status is TaskStatus.RUNNING

    def test_rejects_unknown_status(self, task_factory):
        with pytest.raises(ValueError):
            task_factory(status="paused")

    @pytest.mark.parametrize("value,expected", [(-5, 0), (0, 0), (55, 55), (150, 100)])
    def test_progress_is_clamped(self, task_factory, value, expected):
        assert task_factory(progress=value).progress == expected

    def test_result_truncated_to_limit(self, task_factory):
        task = task_factory(result="r" * (MAX_RESULT_LENGTH + 20))
        assert len(task.result) == MAX_RESULT_LENGTH

    def test_error_truncated_to_limit(self, task_factory):
        task = task_factory(error="e" * (MAX_ERROR_LENGTH * 2))
        assert len(task.error) == MAX_ERROR_LENGTH


class TestTaskState:
    @pytest.mark.parametrize(
        "status,terminal",
        [
            (TaskStatus.PENDING, False),
            (TaskStatus.QUEUED, False),
            (TaskStatus.RUNNING, False),
            (TaskStatus.COMPLETED, True),
            (TaskStatus.FAILED, True),
        ],
    )
    def test_is_terminal(self, task_factory, status, terminal):
        assert task_factory(status=status).is_terminal is terminal

    def test_to_dict_uses_plain_values(self, task_factory):
        data = task_factory(task_id="task-1", status=TaskStatus.QUEUED).to_dict()

        assert data["id"] == "task-1"
        assert data["status"] == "queued"
        assert data["type"] == "bulk_translation"
        assert data["created_at"] == "2025-01-15T12:00:00+00:00"
        assert data["expires_at"] == "2025-01-18T12:00:00+00:00"
