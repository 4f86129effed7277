"""Built-in webhook topic handlers."""

from typing import Any, Dict

from infrastructure.logging import get_module_logger
from infrastructure.resilience.retry import RetryScheduler
from modules.translation.mirror import TranslationMirror
from modules.webhooks.topics import WebhookTopic

logger = get_module_logger()

RESOURCE_TYPES = {
    WebhookTopic.PRODUCTS_CREATE: "Product",
    WebhookTopic.PRODUCTS_UPDATE: "Product",
    WebhookTopic.PRODUCTS_DELETE: "Product",
    WebhookTopic.COLLECTIONS_CREATE: "Collection",
    WebhookTopic.COLLECTIONS_UPDATE: "Collection",
    WebhookTopic.COLLECTIONS_DELETE: "Collection",
}


def resource_gid(payload: Dict[str, Any], resource_type: str) -> str:
    """Return the global id of the resource a webhook payload refers to.

    Raises:
        ValueError: If the payload carries no resource id
    """
    gid = payload.get("admin_graphql_api_id")
    if gid:
        return gid
    resource_id = payload.get("id")
    if resource_id is None:
        raise ValueError(f"{resource_type} webhook payload has no id")
    return f"gid://shopify/{resource_type}/{resource_id}"


def make_resource_changed_handler(topic: WebhookTopic):
    resource_type = RESOURCE_TYPES[topic]

    def handle_resource_changed(payload: Dict[str, Any], shop: str) -> None:
        gid = resource_gid(payload, resource_type)
        logger.info(
            "resource_changed",
            shop=shop,
            topic=topic.value,
            resource_id=gid,
        )

    return handle_resource_changed


def make_resource_deleted_handler(topic: WebhookTopic, mirror: TranslationMirror):
    resource_type = RESOURCE_TYPES[topic]

    def handle_resource_deleted(payload: Dict[str, Any], shop: str) -> None:
        gid = resource_gid(payload, resource_type)
        removed = mirror.delete_resource(shop, gid)
        logger.info(
            "resource_translations_purged",
            shop=shop,
            topic=topic.value,
            resource_id=gid,
            removed=removed,
        )

    return handle_resource_deleted


def make_shop_redact_handler(mirror: TranslationMirror):
    def handle_shop_redact(payload: Dict[str, Any], shop: str) -> None:
        removed = mirror.delete_shop(payload.get("shop_domain") or shop)
        logger.info("shop_translations_redacted", shop=shop, removed=removed)

    return handle_shop_redact


def register_default_handlers(
    scheduler: RetryScheduler, mirror: TranslationMirror
) -> None:
    """Register the built-in handler for every supported topic.

    Topics that already have a handler are left untouched, so calling this
    again for the same scheduler is harmless.
    """
    handlers = {
        WebhookTopic.PRODUCTS_CREATE: make_resource_changed_handler(
            WebhookTopic.PRODUCTS_CREATE
        ),
        WebhookTopic.PRODUCTS_UPDATE: make_resource_changed_handler(
            WebhookTopic.PRODUCTS_UPDATE
        ),
        WebhookTopic.COLLECTIONS_CREATE: make_resource_changed_handler(
            WebhookTopic.COLLECTIONS_CREATE
        ),
        WebhookTopic.COLLECTIONS_UPDATE: make_resource_changed_handler(
            WebhookTopic.COLLECTIONS_UPDATE
        ),
        WebhookTopic.PRODUCTS_DELETE: make_resource_deleted_handler(
            WebhookTopic.PRODUCTS_DELETE, mirror
        ),
        WebhookTopic.COLLECTIONS_DELETE: make_resource_deleted_handler(
            WebhookTopic.COLLECTIONS_DELETE, mirror
        ),
        WebhookTopic.SHOP_REDACT: make_shop_redact_handler(mirror),
    }

    for topic, handler in handlers.items():
        if topic.value in scheduler.registry:
            logger.debug("webhook_handler_already_registered", topic=topic.value)
            continue
        scheduler.register_handler(topic.value, handler)
