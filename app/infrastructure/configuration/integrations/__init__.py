"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.shopify import ShopifySettings

__all__ = [
    "AwsSettings",
    "ShopifySettings",
]
