"""Shopify Admin API integration."""

from integrations.shopify.gateway import (
    ContentGateway,
    RemoteGatewayError,
    ShopifyGraphQLGateway,
)

__all__ = ["ContentGateway", "RemoteGatewayError", "ShopifyGraphQLGateway"]
