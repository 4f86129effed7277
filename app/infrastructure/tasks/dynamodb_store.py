"""DynamoDB-backed task store for multi-instance deployments.

Table Schema:
    PK: task_id (String)
    Attributes: shop, type, status, resource_type, resource_id, field_type,
               target_locale, progress, processed, total, estimated_work,
               result, error, expires_at, created_at, updated_at, ttl
    TTL attribute: ttl (epoch seconds of expires_at)
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.tasks.errors import TaskNotFoundError, TaskPersistenceError
from infrastructure.tasks.models import Task, TaskStatus, TaskType
from infrastructure.tasks.store import validate_changes
from integrations.aws import dynamodb_next

logger = get_module_logger()

_STRING_FIELDS = (
    "shop",
    "type",
    "status",
    "resource_type",
    "resource_id",
    "field_type",
    "target_locale",
    "result",
    "error",
)
_NUMBER_FIELDS = ("progress", "processed", "total", "estimated_work")
_DATETIME_FIELDS = ("expires_at", "created_at", "updated_at")


def _to_attribute(name: str, value: Any) -> Dict[str, Any]:
    if value is None:
        return {"NULL": True}
    if name in _NUMBER_FIELDS:
        return {"N": str(int(value))}
    if name in _DATETIME_FIELDS:
        return {"S": value.isoformat()}
    if isinstance(value, (TaskStatus, TaskType)):
        return {"S": value.value}
    return {"S": str(value)}


def _from_attribute(name: str, attr: Optional[Dict[str, Any]]) -> Any:
    if not attr or attr.get("NULL"):
        return None
    if name in _NUMBER_FIELDS:
        return int(attr["N"])
    if name in _DATETIME_FIELDS:
        return datetime.fromisoformat(attr["S"])
    return attr.get("S")


def task_to_item(task: Task) -> Dict[str, Any]:
    """Convert a Task to a DynamoDB item."""
    item: Dict[str, Any] = {"task_id": {"S": task.id}}
    for name in _STRING_FIELDS + _NUMBER_FIELDS + _DATETIME_FIELDS:
        item[name] = _to_attribute(name, getattr(task, name))
    item["ttl"] = {"N": str(int(task.expires_at.timestamp()))}
    return item


def item_to_task(item: Dict[str, Any]) -> Task:
    """Convert a DynamoDB item to a Task."""
    values = {
        name: _from_attribute(name, item.get(name))
        for name in _STRING_FIELDS + _NUMBER_FIELDS + _DATETIME_FIELDS
    }
    return Task(
        id=item["task_id"]["S"],
        progress=values.pop("progress") or 0,
        **values,
    )


class DynamoDBTaskStore:
    """TaskStore backed by a DynamoDB table.

    Status-guarded updates use a ConditionExpression on ``status`` so a task
    that reached a terminal state cannot be moved back by a late writer.

    Args:
        table_name: DynamoDB table name
    """

    def __init__(self, table_name: str):
        self.table_name = table_name
        logger.info("dynamodb_task_store_initialized", table_name=table_name)

    def get(self, task_id: str) -> Optional[Task]:
        result = dynamodb_next.get_item(
            table_name=self.table_name,
            Key={"task_id": {"S": task_id}},
            ConsistentRead=True,
        )
        if not result.is_success:
            logger.error(
                "dynamodb_task_get_failed",
                task_id=task_id,
                error=result.message,
                error_code=result.error_code,
            )
            raise TaskPersistenceError(
                f"Failed to read task {task_id}: {result.message}",
                error_code=result.error_code,
            )
        item = (result.data or {}).get("Item")
        return item_to_task(item) if item else None

    def create(self, task: Task) -> Task:
        result = dynamodb_next.put_item(
            table_name=self.table_name,
            Item=task_to_item(task),
            ConditionExpression="attribute_not_exists(task_id)",
        )
        if not result.is_success:
            logger.error(
                "dynamodb_task_create_failed",
                task_id=task.id,
                error=result.message,
                error_code=result.error_code,
            )
            raise TaskPersistenceError(
                f"Failed to create task {task.id}: {result.message}",
                error_code=result.error_code,
            )
        logger.debug("task_record_created", task_id=task.id)
        return task

    def update(
        self,
        task_id: str,
        changes: Dict[str, Any],
        allowed_statuses: Optional[Iterable[TaskStatus]] = None,
    ) -> Optional[Task]:
        validate_changes(changes)
        if not changes:
            return self.get(task_id)

        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}
        assignments = []
        for index, (name, value) in enumerate(changes.items()):
            names[f"#f{index}"] = name
            values[f":v{index}"] = _to_attribute(name, value)
            assignments.append(f"#f{index} = :v{index}")

        condition = "attribute_exists(task_id)"
        if allowed_statuses is not None:
            names["#status"] = "status"
            placeholders = []
            for index, status in enumerate(allowed_statuses):
                values[f":s{index}"] = {"S": TaskStatus(status).value}
                placeholders.append(f":s{index}")
            condition += f" AND #status IN ({', '.join(placeholders)})"

        result = dynamodb_next.update_item(
            table_name=self.table_name,
            Key={"task_id": {"S": task_id}},
            UpdateExpression="SET " + ", ".join(assignments),
            ConditionExpression=condition,
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values,
            ReturnValues="ALL_NEW",
        )

        if result.is_success:
            return item_to_task(result.data["Attributes"])

        if result.error_code == "ConditionalCheckFailedException":
            # Either the task is missing or the status guard did not match
            if self.get(task_id) is None:
                raise TaskNotFoundError(task_id)
            logger.debug("task_update_condition_failed", task_id=task_id)
            return None

        logger.error(
            "dynamodb_task_update_failed",
            task_id=task_id,
            error=result.message,
            error_code=result.error_code,
        )
        raise TaskPersistenceError(
            f"Failed to update task {task_id}: {result.message}",
            error_code=result.error_code,
        )

    def find_many(
        self,
        shop: Optional[str] = None,
        statuses: Optional[Iterable[TaskStatus]] = None,
        updated_before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        filters = []
        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}

        if shop is not None:
            filters.append("shop = :shop")
            values[":shop"] = {"S": shop}
        if statuses is not None:
            names["#status"] = "status"
            placeholders = []
            for index, status in enumerate(statuses):
                values[f":s{index}"] = {"S": TaskStatus(status).value}
                placeholders.append(f":s{index}")
            filters.append(f"#status IN ({', '.join(placeholders)})")
        if updated_before is not None:
            filters.append("updated_at < :updated_before")
            values[":updated_before"] = {"S": updated_before.isoformat()}

        kwargs: Dict[str, Any] = {}
        if filters:
            kwargs["FilterExpression"] = " AND ".join(filters)
            kwargs["ExpressionAttributeValues"] = values
        if names:
            kwargs["ExpressionAttributeNames"] = names

        result = dynamodb_next.scan(table_name=self.table_name, **kwargs)
        if not result.is_success:
            logger.error(
                "dynamodb_task_scan_failed",
                error=result.message,
                error_code=result.error_code,
            )
            raise TaskPersistenceError(
                f"Failed to scan tasks: {result.message}",
                error_code=result.error_code,
            )

        tasks = sorted(
            (item_to_task(item) for item in result.data or []),
            key=lambda task: task.created_at,
        )
        return tasks[:limit] if limit is not None else tasks

    def delete(self, task_id: str) -> bool:
        result = dynamodb_next.delete_item(
            table_name=self.table_name,
            Key={"task_id": {"S": task_id}},
        )
        if not result.is_success:
            logger.error(
                "dynamodb_task_delete_failed",
                task_id=task_id,
                error=result.message,
                error_code=result.error_code,
            )
            return False
        return True

    def delete_expired(self, now: datetime) -> int:
        result = dynamodb_next.scan(
            table_name=self.table_name,
            FilterExpression="#ttl < :now",
            ExpressionAttributeNames={"#ttl": "ttl"},
            ExpressionAttributeValues={":now": {"N": str(int(now.timestamp()))}},
            ProjectionExpression="task_id",
        )
        if not result.is_success:
            logger.error(
                "dynamodb_task_expired_scan_failed",
                error=result.message,
                error_code=result.error_code,
            )
            raise TaskPersistenceError(
                f"Failed to scan expired tasks: {result.message}",
                error_code=result.error_code,
            )

        deleted = 0
        for item in result.data or []:
            if self.delete(item["task_id"]["S"]):
                deleted += 1
        if deleted:
            logger.info("expired_tasks_deleted", count=deleted)
        return deleted
