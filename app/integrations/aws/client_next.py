"""
AWS Client Next Module

Centralized error handling, retry logic, standardized results and simplified
pagination for boto3 API calls.

Features:
- Automatic retry with exponential backoff for throttling errors
- OperationResult responses classified by classify_aws_error
- Simplified pagination for list/query/scan operations
- Optional endpoint override (AWS_ENDPOINT_URL) for local DynamoDB

Usage:
    result = execute_aws_api_call(
        service_name="dynamodb",
        method="get_item",
        TableName="content-tasks",
        Key={"task_id": {"S": "abc"}},
    )
    if result.is_success:
        item = result.data.get("Item")

    # Paginated: result.data is the flattened list of items
    result = execute_aws_api_call(
        service_name="dynamodb",
        method="scan",
        TableName="content-tasks",
        keys=["Items"],
        force_paginate=True,
    )
"""

import time
from typing import Any, Callable, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore

from infrastructure.configuration import settings
from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, classify_aws_error

logger = get_module_logger()

AWS_REGION = settings.aws.AWS_REGION
ENDPOINT_URL = settings.aws.ENDPOINT_URL
THROTTLING_ERRS = settings.aws.THROTTLING_ERRS

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.5


def _error_code(error: Exception) -> Optional[str]:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def _should_retry(error: Exception, attempt: int, max_attempts: int) -> bool:
    return _error_code(error) in THROTTLING_ERRS and attempt < max_attempts


def _calculate_retry_delay(attempt: int) -> float:
    return DEFAULT_BACKOFF_FACTOR * (2**attempt)


def _handle_final_error(error: Exception, function_name: str) -> OperationResult:
    """Classify the final error after all retries are exhausted.

    Failed conditional writes are expected by callers using them as guards and
    are logged at debug level only.
    """
    result = classify_aws_error(error)
    error_code = _error_code(error)

    if error_code == "ConditionalCheckFailedException":
        logger.debug(
            "aws_api_condition_failed",
            function=function_name,
        )
    else:
        logger.error(
            "aws_api_error_final",
            function=function_name,
            error=str(error),
            error_code=error_code,
            status=result.status.value,
        )
    return result


def _can_paginate_method(client: BaseClient, method: str) -> bool:
    try:
        return client.can_paginate(method)
    except (AttributeError, TypeError, ValueError):
        return False


def get_aws_client(
    service_name: str,
    session_config: Optional[dict] = None,
    client_config: Optional[dict] = None,
) -> BaseClient:
    """
    Create a boto3 AWS service client.

    Args:
        service_name (str): The name of the AWS service.
        session_config (dict, optional): Session configuration.
        client_config (dict, optional): Client configuration.
    """
    session_config = session_config or {"region_name": AWS_REGION}
    client_config = client_config or {"region_name": AWS_REGION}
    if ENDPOINT_URL and "endpoint_url" not in client_config:
        client_config = {**client_config, "endpoint_url": ENDPOINT_URL}
    session = boto3.Session(**session_config)
    return session.client(service_name, **client_config)


def _paginate_all_results(
    client: BaseClient, method: str, keys: Optional[List[str]] = None, **kwargs
) -> List[dict]:
    paginator = client.get_paginator(method)
    results: List[dict] = []
    for page in paginator.paginate(**kwargs):
        if keys is None:
            for key, value in page.items():
                if key != "ResponseMetadata":
                    if isinstance(value, list):
                        results.extend(value)
                    else:
                        results.append(value)
        else:
            for key in keys:
                if key in page:
                    results.extend(page[key])
    return results


def execute_api_call(
    func_name: str,
    api_call: Callable[[], Any],
    max_retries: Optional[int] = None,
) -> OperationResult:
    """
    Module-level error handling for AWS API calls.

    Args:
        func_name (str): Name of the calling function for logging
        api_call (callable): The API call to execute
        max_retries (int): Override default max retries

    Returns:
        OperationResult: SUCCESS with the raw response (or item list) as data,
        otherwise the classified error.
    """
    max_retry_attempts = max_retries if max_retries is not None else DEFAULT_MAX_RETRIES
    last_exception: Optional[Exception] = None

    for attempt in range(max_retry_attempts + 1):
        try:
            logger.debug(
                "aws_api_call_start",
                function=func_name,
                attempt=attempt + 1,
                max_attempts=max_retry_attempts + 1,
            )

            result = api_call()

            if attempt > 0:
                logger.info(
                    "aws_api_retry_success",
                    function=func_name,
                    attempt=attempt + 1,
                )

            return OperationResult.success(data=result)

        except (BotoCoreError, ClientError) as e:
            last_exception = e

            if _should_retry(e, attempt, max_retry_attempts):
                delay = _calculate_retry_delay(attempt)
                logger.warning(
                    "aws_api_retrying",
                    function=func_name,
                    attempt=attempt + 1,
                    error=str(e),
                    delay=delay,
                )
                time.sleep(delay)
                continue

            return _handle_final_error(e, func_name)

        except Exception as e:  # pylint: disable=broad-except
            last_exception = e
            return _handle_final_error(e, func_name)

    if last_exception is None:
        last_exception = Exception("Unknown error after retries")

    return _handle_final_error(last_exception, func_name)


def execute_aws_api_call(
    service_name: str,
    method: str,
    keys: Optional[List[str]] = None,
    session_config: Optional[dict] = None,
    client_config: Optional[dict] = None,
    max_retries: Optional[int] = None,
    force_paginate: bool = False,
    **kwargs,
) -> OperationResult:
    """
    Execute a boto3 call with retries and standardized results.

    Paginates only when ``force_paginate`` is set and the method supports it.

    Args:
        service_name (str): The name of the AWS service.
        method (str): The method to call on the service.
        keys (list, optional): The keys to extract from paginated results.
        session_config (dict, optional): Session configuration.
        client_config (dict, optional): Client configuration.
        max_retries (int, optional): Override default max retries.
        force_paginate (bool, optional): Collect every page into a flat list.
        **kwargs: Additional keyword arguments for the API call.

    Returns:
        OperationResult: Standardized result for the call.
    """

    def api_call():
        client = get_aws_client(service_name, session_config, client_config)

        if force_paginate and _can_paginate_method(client, method):
            return _paginate_all_results(client, method, keys, **kwargs)
        return getattr(client, method)(**kwargs)

    func_name = f"{service_name}_{method}"
    return execute_api_call(
        func_name,
        api_call,
        max_retries=max_retries,
    )
