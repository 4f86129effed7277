"""Operation status enumeration.

Classifies the outcome of calls to external collaborators (DynamoDB, the
remote content API, AI providers) so callers can tell retryable failures
from permanent ones.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, rate limit, quota)
        PERMANENT_ERROR: Non-retryable error (validation, auth, failed condition)
        NOT_FOUND: Resource not found
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    NOT_FOUND = "not_found"
