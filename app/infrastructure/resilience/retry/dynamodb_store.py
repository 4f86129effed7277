"""DynamoDB-backed retry ledger for durable redelivery.

Entries survive process restarts, so a delivery that failed just before a
deploy is still redelivered afterwards.

Ledger Table Schema:
    PK: entry_id (String)
    Attributes: shop, topic, payload, attempt, max_attempts, next_retry,
               last_error, created_at, status, ttl
    GSI: status-next_retry-index (status + next_retry)

Dead Letter Table Schema:
    PK: entry_id (String)
    Attributes: ledger attributes plus reason, dead_lettered_at, ttl
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.resilience.retry.models import DeadLetterEntry, RetryLedgerEntry
from infrastructure.resilience.retry.store import build_stats
from integrations.aws import dynamodb_next

logger = get_module_logger()

STATUS_ACTIVE = "ACTIVE"
NEXT_RETRY_INDEX = "status-next_retry-index"
DEAD_LETTER_TTL_DAYS = 30


class RetryStorePersistenceError(RuntimeError):
    """Raised when the ledger table cannot be written."""


def _epoch(value: datetime) -> str:
    return str(value.timestamp())


def _from_epoch(value: str) -> datetime:
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


def entry_to_item(entry: RetryLedgerEntry, ttl_days: int) -> Dict[str, Any]:
    """Convert a ledger entry to a DynamoDB item."""
    item: Dict[str, Any] = {
        "entry_id": {"S": entry.id},
        "shop": {"S": entry.shop},
        "topic": {"S": entry.topic},
        "payload": {"S": entry.payload},
        "attempt": {"N": str(entry.attempt)},
        "max_attempts": {"N": str(entry.max_attempts)},
        "next_retry": {"N": _epoch(entry.next_retry)},
        "created_at": {"N": _epoch(entry.created_at)},
        "status": {"S": STATUS_ACTIVE},
        "ttl": {"N": str(int(time.time()) + ttl_days * 24 * 60 * 60)},
    }
    if entry.last_error:
        item["last_error"] = {"S": entry.last_error}
    return item


def item_to_entry(item: Dict[str, Any]) -> RetryLedgerEntry:
    """Convert a DynamoDB item to a ledger entry."""
    last_error = item.get("last_error", {})
    return RetryLedgerEntry(
        id=item["entry_id"]["S"],
        shop=item["shop"]["S"],
        topic=item["topic"]["S"],
        payload=item["payload"]["S"],
        attempt=int(item["attempt"]["N"]),
        max_attempts=int(item["max_attempts"]["N"]),
        next_retry=_from_epoch(item["next_retry"]["N"]),
        created_at=_from_epoch(item["created_at"]["N"]),
        last_error=last_error.get("S") if isinstance(last_error, dict) else None,
    )


class DynamoDBRetryStore:
    """DynamoDB implementation of RetryStore.

    Args:
        table_name: Ledger table name
        dead_letter_table_name: Dead letter table name
        ttl_days: Days until ledger items auto-expire through DynamoDB TTL
    """

    def __init__(
        self,
        table_name: str,
        dead_letter_table_name: str,
        ttl_days: int = 7,
    ):
        self.table_name = table_name
        self.dead_letter_table_name = dead_letter_table_name
        self.ttl_days = ttl_days

        logger.info(
            "dynamodb_retry_store_initialized",
            table_name=table_name,
            dead_letter_table_name=dead_letter_table_name,
        )

    def save(self, entry: RetryLedgerEntry) -> str:
        result = dynamodb_next.put_item(
            table_name=self.table_name,
            Item=entry_to_item(entry, self.ttl_days),
        )
        if not result.is_success:
            logger.error(
                "dynamodb_retry_save_failed",
                entry_id=entry.id,
                error=result.message,
                error_code=result.error_code,
            )
            raise RetryStorePersistenceError(
                f"Failed to save retry entry: {result.message}"
            )
        logger.debug("retry_entry_saved", entry_id=entry.id, topic=entry.topic)
        return entry.id

    def get(self, entry_id: str) -> Optional[RetryLedgerEntry]:
        result = dynamodb_next.get_item(
            table_name=self.table_name,
            Key={"entry_id": {"S": entry_id}},
        )
        if not result.is_success:
            logger.error(
                "dynamodb_retry_get_failed",
                entry_id=entry_id,
                error=result.message,
                error_code=result.error_code,
            )
            return None
        item = (result.data or {}).get("Item")
        return item_to_entry(item) if item else None

    def fetch_due(self, now: datetime, limit: int) -> List[RetryLedgerEntry]:
        result = dynamodb_next.query(
            table_name=self.table_name,
            IndexName=NEXT_RETRY_INDEX,
            KeyConditionExpression="#status = :status AND next_retry <= :now",
            FilterExpression="attempt < max_attempts",
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues={
                ":status": {"S": STATUS_ACTIVE},
                ":now": {"N": _epoch(now)},
            },
            ScanIndexForward=True,
        )
        if not result.is_success:
            logger.error(
                "dynamodb_fetch_due_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return []

        entries = sorted(
            (item_to_entry(item) for item in result.data or []),
            key=lambda entry: entry.next_retry,
        )
        logger.debug("fetched_due_retry_entries", count=len(entries))
        return entries[:limit]

    def fetch_exhausted(self) -> List[RetryLedgerEntry]:
        result = dynamodb_next.scan(
            table_name=self.table_name,
            FilterExpression="attempt >= max_attempts",
        )
        if not result.is_success:
            logger.error(
                "dynamodb_fetch_exhausted_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return []
        return [item_to_entry(item) for item in result.data or []]

    def update(
        self,
        entry_id: str,
        attempt: int,
        next_retry: datetime,
        last_error: Optional[str],
    ) -> None:
        update_expr = "SET attempt = :attempt, next_retry = :next_retry"
        values: Dict[str, Any] = {
            ":attempt": {"N": str(attempt)},
            ":next_retry": {"N": _epoch(next_retry)},
        }
        if last_error:
            update_expr += ", last_error = :error"
            values[":error"] = {"S": last_error}

        result = dynamodb_next.update_item(
            table_name=self.table_name,
            Key={"entry_id": {"S": entry_id}},
            UpdateExpression=update_expr,
            ConditionExpression="attribute_exists(entry_id)",
            ExpressionAttributeValues=values,
        )
        if result.is_success:
            return
        if result.error_code == "ConditionalCheckFailedException":
            logger.warning("retry_entry_update_not_found", entry_id=entry_id)
            return
        logger.error(
            "dynamodb_retry_update_failed",
            entry_id=entry_id,
            error=result.message,
            error_code=result.error_code,
        )
        raise RetryStorePersistenceError(
            f"Failed to update retry entry: {result.message}"
        )

    def delete(self, entry_id: str) -> bool:
        result = dynamodb_next.delete_item(
            table_name=self.table_name,
            Key={"entry_id": {"S": entry_id}},
        )
        if not result.is_success:
            logger.error(
                "dynamodb_retry_delete_failed",
                entry_id=entry_id,
                error=result.message,
                error_code=result.error_code,
            )
            return False
        return True

    def delete_stale(self, cutoff: datetime) -> int:
        result = dynamodb_next.scan(
            table_name=self.table_name,
            FilterExpression="created_at < :cutoff OR attempt >= max_attempts",
            ExpressionAttributeValues={":cutoff": {"N": _epoch(cutoff)}},
            ProjectionExpression="entry_id",
        )
        if not result.is_success:
            logger.error(
                "dynamodb_retry_stale_scan_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return 0
        return sum(
            1 for item in result.data or [] if self.delete(item["entry_id"]["S"])
        )

    def record_dead_letter(self, entry: RetryLedgerEntry, reason: str) -> None:
        item = entry_to_item(entry, DEAD_LETTER_TTL_DAYS)
        item["status"] = {"S": "DEAD_LETTER"}
        item["reason"] = {"S": reason}
        item["dead_lettered_at"] = {"N": _epoch(datetime.now(timezone.utc))}

        result = dynamodb_next.put_item(
            table_name=self.dead_letter_table_name,
            Item=item,
        )
        if not result.is_success:
            logger.error(
                "dynamodb_dead_letter_failed",
                entry_id=entry.id,
                error=result.message,
                error_code=result.error_code,
            )
            raise RetryStorePersistenceError(
                f"Failed to record dead letter: {result.message}"
            )

    def list_dead_letters(self, limit: int = 100) -> List[DeadLetterEntry]:
        result = dynamodb_next.scan(table_name=self.dead_letter_table_name)
        if not result.is_success:
            logger.error(
                "dynamodb_dead_letter_scan_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return []
        dead_letters = [
            DeadLetterEntry(
                entry=item_to_entry(item),
                reason=item.get("reason", {}).get("S", ""),
                dead_lettered_at=_from_epoch(item["dead_lettered_at"]["N"]),
            )
            for item in result.data or []
        ]
        dead_letters.sort(key=lambda dead: dead.dead_lettered_at)
        return dead_letters[-limit:]

    def get_stats(self, shop: Optional[str] = None) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if shop is not None:
            kwargs["FilterExpression"] = "shop = :shop"
            kwargs["ExpressionAttributeValues"] = {":shop": {"S": shop}}

        result = dynamodb_next.scan(table_name=self.table_name, **kwargs)
        if not result.is_success:
            logger.error(
                "dynamodb_retry_stats_failed",
                error=result.message,
                error_code=result.error_code,
            )
            raise RetryStorePersistenceError(
                f"Failed to read retry stats: {result.message}"
            )
        return build_stats([item_to_entry(item) for item in result.data or []])
