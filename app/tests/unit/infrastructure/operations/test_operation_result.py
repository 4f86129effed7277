"""Unit tests for OperationResult and OperationStatus."""

import pytest

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

pytestmark = pytest.mark.unit


class TestOperationResultFactories:
    def test_success_factory_minimal(self):
        result = OperationResult.success()
        assert result.status == OperationStatus.SUCCESS
        assert result.is_success
        assert not result.is_transient

    def test_success_factory_with_data(self):
        result = OperationResult.success(data=[{"id": "1"}], message="Scanned")
        assert result.data == [{"id": "1"}]
        assert result.message == "Scanned"

    def test_error_factory_with_error_code(self):
        result = OperationResult.error(
            OperationStatus.NOT_FOUND, "Missing", error_code="NOT_FOUND"
        )
        assert result.status == OperationStatus.NOT_FOUND
        assert result.error_code == "NOT_FOUND"
        assert not result.is_success

    def test_transient_error_factory(self):
        result = OperationResult.transient_error(
            "Timeout", error_code="TIMEOUT", retry_after=5
        )
        assert result.is_transient
        assert result.retry_after == 5

    def test_permanent_error_factory(self):
        result = OperationResult.permanent_error("Invalid", error_code="INVALID")
        assert result.status == OperationStatus.PERMANENT_ERROR
        assert not result.is_transient
