"""Supported inbound webhook topics."""

from enum import Enum


class WebhookTopic(str, Enum):
    PRODUCTS_CREATE = "products/create"
    PRODUCTS_UPDATE = "products/update"
    PRODUCTS_DELETE = "products/delete"
    COLLECTIONS_CREATE = "collections/create"
    COLLECTIONS_UPDATE = "collections/update"
    COLLECTIONS_DELETE = "collections/delete"
    SHOP_REDACT = "shop/redact"


KNOWN_TOPICS = frozenset(topic.value for topic in WebhookTopic)
