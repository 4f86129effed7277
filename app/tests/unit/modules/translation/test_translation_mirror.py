"""Unit tests for the local translation mirror."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from infrastructure.operations import OperationResult, OperationStatus
from modules.translation.mirror import (
    DynamoDBTranslationMirror,
    InMemoryTranslationMirror,
    TranslationMirrorRecord,
    create_translation_mirror,
)

pytestmark = pytest.mark.unit

SHOP = "demo.myshopify.com"
PRODUCT = "gid://shopify/Product/1"


def _record(key="title", locale="en", value="Hello", shop=SHOP, resource_id=PRODUCT):
    return TranslationMirrorRecord(
        shop=shop,
        resource_id=resource_id,
        key=key,
        locale=locale,
        value=value,
        digest=f"digest-{key}",
        updated_at=datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc),
    )


class TestInMemoryTranslationMirror:
    def test_upsert_replaces_same_key_and_locale(self):
        mirror = InMemoryTranslationMirror()
        mirror.upsert(_record(value="Hello"))
        mirror.upsert(_record(value="Hi"))

        records = mirror.list_for_resource(SHOP, PRODUCT)

        assert [r.value for r in records] == ["Hi"]

    def test_list_filters_by_locale(self):
        mirror = InMemoryTranslationMirror()
        mirror.upsert(_record(locale="en"))
        mirror.upsert(_record(locale="fr", value="Bonjour"))

        records = mirror.list_for_resource(SHOP, PRODUCT, locale="fr")

        assert [r.value for r in records] == ["Bonjour"]

    def test_delete_resource_only_touches_that_resource(self):
        mirror = InMemoryTranslationMirror()
        mirror.upsert(_record(key="title"))
        mirror.upsert(_record(key="body_html"))
        mirror.upsert(_record(resource_id="gid://shopify/Product/2"))

        assert mirror.delete_resource(SHOP, PRODUCT) == 2
        assert mirror.list_for_resource(SHOP, PRODUCT) == []
        assert len(mirror.list_for_resource(SHOP, "gid://shopify/Product/2")) == 1

    def test_delete_shop(self):
        mirror = InMemoryTranslationMirror()
        mirror.upsert(_record())
        mirror.upsert(_record(shop="other.myshopify.com"))

        assert mirror.delete_shop(SHOP) == 1
        assert len(mirror.list_for_resource("other.myshopify.com", PRODUCT)) == 1


@pytest.fixture
def mock_dynamodb_next():
    with patch("modules.translation.mirror.dynamodb_next") as mock:
        mock.put_item.return_value = OperationResult.success()
        mock.delete_item.return_value = OperationResult.success()
        yield mock


class TestDynamoDBTranslationMirror:
    def test_upsert_item_layout(self, mock_dynamodb_next):
        DynamoDBTranslationMirror("content-translations").upsert(_record())

        item = mock_dynamodb_next.put_item.call_args.kwargs["Item"]
        assert item["pk"] == {"S": f"{SHOP}#{PRODUCT}"}
        assert item["sk"] == {"S": "en#title"}
        assert item["digest"] == {"S": "digest-title"}

    def test_upsert_failure_is_logged_not_raised(self, mock_dynamodb_next):
        mock_dynamodb_next.put_item.return_value = OperationResult.transient_error(
            "throttled"
        )
        DynamoDBTranslationMirror("content-translations").upsert(_record())

    def test_list_for_resource_with_locale(self, mock_dynamodb_next):
        mirror = DynamoDBTranslationMirror("content-translations")
        mock_dynamodb_next.query.return_value = OperationResult.success(
            data=[
                {
                    "shop": {"S": SHOP},
                    "resource_id": {"S": PRODUCT},
                    "key": {"S": "title"},
                    "locale": {"S": "en"},
                    "value": {"S": "Hello"},
                    "updated_at": {"S": "2025-01-15T12:00:00+00:00"},
                }
            ]
        )

        records = mirror.list_for_resource(SHOP, PRODUCT, locale="en")

        kwargs = mock_dynamodb_next.query.call_args.kwargs
        assert "begins_with(sk, :locale)" in kwargs["KeyConditionExpression"]
        assert kwargs["ExpressionAttributeValues"][":locale"] == {"S": "en#"}
        assert records[0].value == "Hello"
        assert records[0].digest is None

    def test_list_failure_returns_empty(self, mock_dynamodb_next):
        mock_dynamodb_next.query.return_value = OperationResult.error(
            OperationStatus.NOT_FOUND, "missing table"
        )
        assert DynamoDBTranslationMirror("t").list_for_resource(SHOP, PRODUCT) == []

    def test_delete_resource_counts_deleted(self, mock_dynamodb_next):
        mock_dynamodb_next.query.return_value = OperationResult.success(
            data=[
                {"pk": {"S": "a"}, "sk": {"S": "en#title"}},
                {"pk": {"S": "a"}, "sk": {"S": "fr#title"}},
            ]
        )
        mock_dynamodb_next.delete_item.side_effect = [
            OperationResult.success(),
            OperationResult.transient_error("throttled"),
        ]

        assert DynamoDBTranslationMirror("t").delete_resource(SHOP, PRODUCT) == 1

    def test_delete_shop_scans_by_shop(self, mock_dynamodb_next):
        mock_dynamodb_next.scan.return_value = OperationResult.success(
            data=[{"pk": {"S": "a"}, "sk": {"S": "en#title"}}]
        )

        assert DynamoDBTranslationMirror("t").delete_shop(SHOP) == 1
        kwargs = mock_dynamodb_next.scan.call_args.kwargs
        assert kwargs["ExpressionAttributeValues"] == {":shop": {"S": SHOP}}


class TestCreateTranslationMirror:
    def test_memory(self):
        assert isinstance(create_translation_mirror("memory", "t"), InMemoryTranslationMirror)

    def test_dynamodb(self):
        mirror = create_translation_mirror("dynamodb", "content-translations")
        assert isinstance(mirror, DynamoDBTranslationMirror)
        assert mirror.table_name == "content-translations"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown translation mirror backend"):
            create_translation_mirror("redis", "t")
