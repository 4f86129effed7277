"""Remote translatable content operations.

Translations are registered against the digest of the source content they
were produced from, so stale translations are rejected remotely. A field
without a digest cannot be written and is skipped.
"""

from typing import Dict

from infrastructure.logging import get_module_logger
from integrations.shopify import ContentGateway, RemoteGatewayError

logger = get_module_logger()

TRANSLATABLE_CONTENT_QUERY = """
query translatableContent($resourceId: ID!) {
  translatableResource(resourceId: $resourceId) {
    resourceId
    translatableContent {
      key
      digest
      locale
    }
  }
}
"""

TRANSLATIONS_REGISTER_MUTATION = """
mutation translationsRegister($resourceId: ID!, $translations: [TranslationInput!]!) {
  translationsRegister(resourceId: $resourceId, translations: $translations) {
    userErrors {
      field
      message
    }
    translations {
      key
      locale
    }
  }
}
"""


def fetch_digest_map(gateway: ContentGateway, resource_id: str) -> Dict[str, str]:
    """Return content key → digest for a resource.

    Raises:
        RemoteGatewayError: If the content cannot be fetched
    """
    data = gateway.execute(TRANSLATABLE_CONTENT_QUERY, {"resourceId": resource_id})
    resource = data.get("translatableResource") or {}
    content = resource.get("translatableContent") or []
    digest_map = {
        item["key"]: item["digest"]
        for item in content
        if item.get("key") and item.get("digest")
    }
    logger.debug(
        "translatable_content_fetched",
        resource_id=resource_id,
        content_count=len(digest_map),
    )
    return digest_map


def register_translation(
    gateway: ContentGateway,
    resource_id: str,
    key: str,
    value: str,
    locale: str,
    digest: str,
) -> None:
    """Write one translated value remotely.

    Raises:
        RemoteGatewayError: On transport failures or user errors
    """
    data = gateway.execute(
        TRANSLATIONS_REGISTER_MUTATION,
        {
            "resourceId": resource_id,
            "translations": [
                {
                    "key": key,
                    "value": value,
                    "locale": locale,
                    "translatableContentDigest": digest,
                }
            ],
        },
    )
    payload = data.get("translationsRegister") or {}
    user_errors = payload.get("userErrors") or []
    if user_errors:
        messages = "; ".join(error.get("message", "") for error in user_errors)
        raise RemoteGatewayError(
            f"Translation rejected for {key}/{locale}: {messages}",
            errors=user_errors,
        )
