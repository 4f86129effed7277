"""Shopify Admin API integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class ShopifySettings(IntegrationSettings):
    """Shopify Admin API configuration.

    Environment Variables:
        SHOPIFY_API_SECRET: App secret used to verify webhook signatures
        SHOPIFY_ACCESS_TOKEN: Admin API access token for GraphQL calls
        SHOPIFY_API_VERSION: Admin API version (default: 2025-01)
        SHOPIFY_REQUEST_TIMEOUT_SECONDS: HTTP timeout per GraphQL call (default: 30)
    """

    API_SECRET: str = Field(default="", alias="SHOPIFY_API_SECRET")
    ACCESS_TOKEN: str = Field(default="", alias="SHOPIFY_ACCESS_TOKEN")
    API_VERSION: str = Field(default="2025-01", alias="SHOPIFY_API_VERSION")
    REQUEST_TIMEOUT_SECONDS: int = Field(
        default=30, alias="SHOPIFY_REQUEST_TIMEOUT_SECONDS"
    )
