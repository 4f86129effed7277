"""Result type for calls to DynamoDB, the remote content API and AI providers.

Gateways return an ``OperationResult`` rather than raising, so callers
decide per status whether to retry, skip or fail the surrounding task.
"""

from dataclasses import dataclass
from typing import Any, Optional

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Outcome of one external call.

    Attributes:
        status: High-level outcome
        message: Human-readable summary for logs
        data: Payload on success (item, list of items, response body)
        error_code: Provider error code, e.g. ``ConditionalCheckFailedException``
        retry_after: Seconds the provider asked us to wait, when throttled
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status is OperationStatus.SUCCESS

    @property
    def is_transient(self) -> bool:
        return self.status is OperationStatus.TRANSIENT_ERROR

    @classmethod
    def success(cls, data: Optional[Any] = None, message: str = "ok"):
        return cls(OperationStatus.SUCCESS, message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ):
        return cls(status, message, data, error_code, retry_after)

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ):
        """Throttling, timeouts, exhausted provider quota."""
        return cls.error(
            OperationStatus.TRANSIENT_ERROR, message, error_code, retry_after
        )

    @classmethod
    def permanent_error(cls, message: str, error_code: Optional[str] = None):
        """Validation failures, bad credentials, failed conditional writes."""
        return cls.error(OperationStatus.PERMANENT_ERROR, message, error_code)
