"""DynamoDB calls used by the task store, the retry ledger and the
translation mirror.

Every function returns the ``OperationResult`` produced by
``client_next.execute_aws_api_call``; nothing here raises on AWS errors.
``query`` and ``scan`` follow pagination and return the flattened list of
items as ``result.data``.

Usage:
    result = dynamodb_next.get_item(
        table_name=self.table_name,
        Key={"task_id": {"S": task_id}},
        ConsistentRead=True,
    )
    if result.is_success and "Item" in result.data:
        task = item_to_task(result.data["Item"])
"""

from typing import Any, Dict

from infrastructure.operations import OperationResult
from integrations.aws.client_next import execute_aws_api_call

DynamoKey = Dict[str, Any]


def _call(method: str, table_name: str, **params: Any) -> OperationResult:
    return execute_aws_api_call(
        service_name="dynamodb", method=method, TableName=table_name, **params
    )


def _paginated(method: str, table_name: str, **params: Any) -> OperationResult:
    return _call(method, table_name, keys=["Items"], force_paginate=True, **params)


def get_item(table_name: str, Key: DynamoKey, **kwargs) -> OperationResult:
    """Fetch one item; ``result.data`` has no ``Item`` key when it is absent."""
    return _call("get_item", table_name, Key=Key, **kwargs)


def put_item(table_name: str, Item: DynamoKey, **kwargs) -> OperationResult:
    return _call("put_item", table_name, Item=Item, **kwargs)


def update_item(table_name: str, Key: DynamoKey, **kwargs) -> OperationResult:
    """Apply an update expression.

    The task store guards status transitions with a ``ConditionExpression``;
    a failed guard comes back as a PERMANENT_ERROR result with
    ``error_code == "ConditionalCheckFailedException"``.
    """
    return _call("update_item", table_name, Key=Key, **kwargs)


def delete_item(table_name: str, Key: DynamoKey, **kwargs) -> OperationResult:
    return _call("delete_item", table_name, Key=Key, **kwargs)


def query(
    table_name: str, KeyConditionExpression: str, **kwargs
) -> OperationResult:
    """Query every page, e.g. all mirror rows of one shop."""
    return _paginated(
        "query", table_name, KeyConditionExpression=KeyConditionExpression, **kwargs
    )


def scan(table_name: str, **kwargs) -> OperationResult:
    """Scan every page, e.g. due ledger entries or expired tasks."""
    return _paginated("scan", table_name, **kwargs)
