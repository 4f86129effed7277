"""Error classifiers for collaborator exceptions.

Converts exceptions raised by the AWS SDK, the remote content gateway and
AI translation providers into standardized OperationResult objects.

Key Functions:
- classify_aws_error(): AWS SDK errors → OperationResult
- classify_remote_error(): content gateway / HTTP errors → OperationResult
- classify_provider_error(): AI provider errors → OperationResult
- is_quota_error(): detect provider quota / rate-limit vocabulary

Usage:
    from infrastructure.operations.classifiers import classify_provider_error

    try:
        provider.translate_batch(fields, "de", ["en", "fr"])
    except Exception as exc:
        result = classify_provider_error(exc)
        if result.error_code == "QUOTA_EXCEEDED":
            ...
"""

from typing import Optional

import requests
from botocore.exceptions import ClientError

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# Provider messages that indicate an exhausted budget rather than a generic error
QUOTA_ERROR_PATTERNS = ("quota", "rate limit", "429", "usage limit")


def is_quota_error(message: Optional[str]) -> bool:
    """Return True if an error message uses provider quota/rate-limit vocabulary.

    Matching is case-insensitive.

    Args:
        message: Error message, may be None

    Returns:
        True when any of QUOTA_ERROR_PATTERNS occurs in the message
    """
    if not message:
        return False
    lowered = message.lower()
    return any(pattern in lowered for pattern in QUOTA_ERROR_PATTERNS)


def classify_aws_error(exc: Exception) -> OperationResult:
    """Classify AWS SDK errors into OperationResult.

    Error Code Mapping:
    - ThrottlingException / ProvisionedThroughputExceededException → TRANSIENT_ERROR
    - ConditionalCheckFailedException → PERMANENT_ERROR (CONDITION_FAILED)
    - AccessDeniedException → PERMANENT_ERROR
    - ResourceNotFoundException → NOT_FOUND
    - ValidationException → PERMANENT_ERROR
    - Other ClientError → TRANSIENT_ERROR (AWS convention)
    - Non-ClientError (BotoCoreError, connection) → TRANSIENT_ERROR

    Args:
        exc: Exception raised by boto3/botocore

    Returns:
        OperationResult with status, message and error_code
    """
    if not isinstance(exc, ClientError):
        return OperationResult.transient_error(
            f"AWS connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    error_code = "Unknown"
    if hasattr(exc, "response") and exc.response:
        error_info = exc.response.get("Error", {})
        error_code = error_info.get("Code", "Unknown")

    if error_code in ("ThrottlingException", "ProvisionedThroughputExceededException"):
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "AWS API throttled",
            error_code="RATE_LIMITED",
            retry_after=60,
        )

    if error_code == "ConditionalCheckFailedException":
        return OperationResult.permanent_error(
            "DynamoDB condition check failed",
            error_code="ConditionalCheckFailedException",
        )

    if error_code == "AccessDeniedException":
        return OperationResult.permanent_error(
            "AWS API access denied",
            error_code="FORBIDDEN",
        )

    if error_code == "ResourceNotFoundException":
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "AWS resource not found",
            error_code="NOT_FOUND",
        )

    if error_code in ("ValidationException", "InvalidParameterException"):
        return OperationResult.permanent_error(
            f"AWS validation error: {error_code}",
            error_code="INVALID_REQUEST",
        )

    # AWS SDK convention: unknown errors are transient
    return OperationResult.transient_error(
        f"AWS client error: {error_code}",
        error_code="AWS_CLIENT_ERROR",
    )


def classify_remote_error(exc: Exception) -> OperationResult:
    """Classify remote content gateway errors into OperationResult.

    Status Code Mapping:
    - connection errors / timeouts → TRANSIENT_ERROR
    - 429 → TRANSIENT_ERROR (RATE_LIMITED) with retry_after
    - 401 / 403 → PERMANENT_ERROR
    - 404 → NOT_FOUND
    - 5xx → TRANSIENT_ERROR
    - other 4xx → PERMANENT_ERROR
    - GraphQL level errors without status → PERMANENT_ERROR

    Args:
        exc: Exception raised by the gateway. Exceptions with a ``status_code``
            attribute (RemoteGatewayError) are classified by that code.

    Returns:
        OperationResult with status, message, error_code and retry_after
    """
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return OperationResult.transient_error(
            f"Connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    status_code: Optional[int] = getattr(exc, "status_code", None)

    if status_code == 429:
        retry_after = getattr(exc, "retry_after", None) or 2
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "Remote API rate limited",
            error_code="RATE_LIMITED",
            retry_after=retry_after,
        )

    if status_code in (401, 403):
        return OperationResult.permanent_error(
            f"Remote API authorization failed ({status_code})",
            error_code="UNAUTHORIZED",
        )

    if status_code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "Remote resource not found",
            error_code="NOT_FOUND",
        )

    if status_code and 500 <= status_code < 600:
        return OperationResult.transient_error(
            f"Remote API server error ({status_code})",
            error_code="SERVER_ERROR",
        )

    if status_code and 400 <= status_code < 500:
        return OperationResult.permanent_error(
            f"Remote API client error ({status_code}): {str(exc)}",
            error_code="HTTP_ERROR",
        )

    return OperationResult.permanent_error(
        f"Remote API error: {str(exc)}",
        error_code="REMOTE_ERROR",
    )


def classify_provider_error(exc: Exception) -> OperationResult:
    """Classify AI translation provider errors into OperationResult.

    Quota and rate-limit failures are tagged QUOTA_EXCEEDED so operators can
    tell an exhausted budget from a generic failure. Everything else a
    provider raises is treated as transient.

    Args:
        exc: Exception raised by a translation provider

    Returns:
        OperationResult with TRANSIENT_ERROR status
    """
    message = str(exc) or type(exc).__name__

    if is_quota_error(message):
        return OperationResult.transient_error(
            f"Provider quota exceeded: {message}",
            error_code="QUOTA_EXCEEDED",
        )

    return OperationResult.transient_error(
        f"Provider error: {type(exc).__name__}: {message}",
        error_code="PROVIDER_ERROR",
    )
