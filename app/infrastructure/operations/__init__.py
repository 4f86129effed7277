"""Operation result types and status enums.

Standardized result types for calls to external collaborators, including
status enums, result dataclasses, and error classifiers.
"""

from infrastructure.operations.classifiers import (
    QUOTA_ERROR_PATTERNS,
    classify_aws_error,
    classify_provider_error,
    classify_remote_error,
    is_quota_error,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "QUOTA_ERROR_PATTERNS",
    "classify_aws_error",
    "classify_provider_error",
    "classify_remote_error",
    "is_quota_error",
]
