"""Local mirror of translations accepted by the remote content API.

Rows are upserted after each successful remote write and purged when the
resource is deleted or the shop requests redaction. Mirror failures never
fail a translation run.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Tuple

from infrastructure.logging import get_module_logger
from integrations.aws import dynamodb_next

logger = get_module_logger()


@dataclass
class TranslationMirrorRecord:
    """One mirrored translation value."""

    shop: str
    resource_id: str
    key: str
    locale: str
    value: str
    digest: Optional[str] = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class TranslationMirror(Protocol):
    def upsert(self, record: TranslationMirrorRecord) -> None:
        ...

    def list_for_resource(
        self, shop: str, resource_id: str, locale: Optional[str] = None
    ) -> List[TranslationMirrorRecord]:
        ...

    def delete_resource(self, shop: str, resource_id: str) -> int:
        ...

    def delete_shop(self, shop: str) -> int:
        ...


class InMemoryTranslationMirror:
    """Thread-safe in-memory mirror keyed by (shop, resource_id, key, locale)."""

    def __init__(self) -> None:
        self._records: Dict[Tuple[str, str, str, str], TranslationMirrorRecord] = {}
        self._lock = threading.Lock()

    def upsert(self, record: TranslationMirrorRecord) -> None:
        with self._lock:
            self._records[
                (record.shop, record.resource_id, record.key, record.locale)
            ] = record

    def list_for_resource(
        self, shop: str, resource_id: str, locale: Optional[str] = None
    ) -> List[TranslationMirrorRecord]:
        with self._lock:
            return [
                record
                for (r_shop, r_resource, _, r_locale), record in self._records.items()
                if r_shop == shop
                and r_resource == resource_id
                and (locale is None or r_locale == locale)
            ]

    def delete_resource(self, shop: str, resource_id: str) -> int:
        with self._lock:
            keys = [k for k in self._records if k[0] == shop and k[1] == resource_id]
            for k in keys:
                del self._records[k]
        return len(keys)

    def delete_shop(self, shop: str) -> int:
        with self._lock:
            keys = [k for k in self._records if k[0] == shop]
            for k in keys:
                del self._records[k]
        return len(keys)


class DynamoDBTranslationMirror:
    """Mirror backed by DynamoDB.

    Table Schema:
        PK: pk (String) = "<shop>#<resource_id>"
        SK: sk (String) = "<locale>#<key>"
        Attributes: shop, resource_id, key, locale, value, digest, updated_at
    """

    def __init__(self, table_name: str):
        self.table_name = table_name

    @staticmethod
    def _pk(shop: str, resource_id: str) -> str:
        return f"{shop}#{resource_id}"

    def upsert(self, record: TranslationMirrorRecord) -> None:
        item = {
            "pk": {"S": self._pk(record.shop, record.resource_id)},
            "sk": {"S": f"{record.locale}#{record.key}"},
            "shop": {"S": record.shop},
            "resource_id": {"S": record.resource_id},
            "key": {"S": record.key},
            "locale": {"S": record.locale},
            "value": {"S": record.value},
            "updated_at": {"S": record.updated_at.isoformat()},
        }
        if record.digest:
            item["digest"] = {"S": record.digest}

        result = dynamodb_next.put_item(table_name=self.table_name, Item=item)
        if not result.is_success:
            logger.error(
                "translation_mirror_upsert_failed",
                resource_id=record.resource_id,
                locale=record.locale,
                key=record.key,
                error=result.message,
            )

    def list_for_resource(
        self, shop: str, resource_id: str, locale: Optional[str] = None
    ) -> List[TranslationMirrorRecord]:
        condition = "pk = :pk"
        values = {":pk": {"S": self._pk(shop, resource_id)}}
        if locale is not None:
            condition += " AND begins_with(sk, :locale)"
            values[":locale"] = {"S": f"{locale}#"}

        result = dynamodb_next.query(
            table_name=self.table_name,
            KeyConditionExpression=condition,
            ExpressionAttributeValues=values,
        )
        if not result.is_success:
            logger.error(
                "translation_mirror_query_failed",
                resource_id=resource_id,
                error=result.message,
            )
            return []
        return [self._item_to_record(item) for item in result.data or []]

    def delete_resource(self, shop: str, resource_id: str) -> int:
        result = dynamodb_next.query(
            table_name=self.table_name,
            KeyConditionExpression="pk = :pk",
            ExpressionAttributeValues={":pk": {"S": self._pk(shop, resource_id)}},
            ProjectionExpression="pk, sk",
        )
        if not result.is_success:
            logger.error(
                "translation_mirror_query_failed",
                resource_id=resource_id,
                error=result.message,
            )
            return 0
        return self._delete_items(result.data or [])

    def delete_shop(self, shop: str) -> int:
        result = dynamodb_next.scan(
            table_name=self.table_name,
            FilterExpression="shop = :shop",
            ExpressionAttributeValues={":shop": {"S": shop}},
            ProjectionExpression="pk, sk",
        )
        if not result.is_success:
            logger.error("translation_mirror_scan_failed", error=result.message)
            return 0
        return self._delete_items(result.data or [])

    def _delete_items(self, items: List[dict]) -> int:
        deleted = 0
        for item in items:
            result = dynamodb_next.delete_item(
                table_name=self.table_name,
                Key={"pk": item["pk"], "sk": item["sk"]},
            )
            if result.is_success:
                deleted += 1
        return deleted

    @staticmethod
    def _item_to_record(item: dict) -> TranslationMirrorRecord:
        return TranslationMirrorRecord(
            shop=item["shop"]["S"],
            resource_id=item["resource_id"]["S"],
            key=item["key"]["S"],
            locale=item["locale"]["S"],
            value=item["value"]["S"],
            digest=item.get("digest", {}).get("S"),
            updated_at=datetime.fromisoformat(item["updated_at"]["S"]),
        )


def create_translation_mirror(backend: str, table_name: str) -> TranslationMirror:
    """Create the mirror selected by ``TRANSLATION_MIRROR_BACKEND``.

    Raises:
        ValueError: If an unknown backend is specified
    """
    if backend == "memory":
        return InMemoryTranslationMirror()
    if backend == "dynamodb":
        return DynamoDBTranslationMirror(table_name=table_name)
    raise ValueError(
        f"Unknown translation mirror backend: {backend}. Supported: memory, dynamodb"
    )
