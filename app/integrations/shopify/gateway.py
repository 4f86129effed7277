"""Remote content gateway for the Shopify Admin GraphQL API.

The orchestrator only depends on the ContentGateway protocol:

    gateway.execute(operation, variables) -> dict   # the GraphQL ``data``

and on RemoteGatewayError for failures. ShopifyGraphQLGateway is the
production implementation over ``requests``.

Usage:
    gateway = ShopifyGraphQLGateway(
        shop="example.myshopify.com",
        access_token=settings.shopify.ACCESS_TOKEN,
    )
    data = gateway.execute(DIGEST_QUERY, {"resourceId": "gid://shopify/Product/1"})
"""

from typing import Any, Dict, List, Optional, Protocol

import requests

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, classify_remote_error

logger = get_module_logger()

DEFAULT_API_VERSION = "2025-01"


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Seconds from a numeric ``Retry-After`` header; None for dates or junk."""
    if not value:
        return None
    try:
        return max(0, int(float(value)))
    except (ValueError, OverflowError):
        return None


class RemoteGatewayError(Exception):
    """Raised when the remote content API rejects or fails a call.

    Attributes:
        status_code: HTTP status, when the failure came from the transport
        retry_after: Seconds to wait, when the API asked for it
        errors: GraphQL error objects, when present
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retry_after: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        self.status_code = status_code
        self.retry_after = retry_after
        self.errors = errors or []
        super().__init__(message)

    def classify(self) -> OperationResult:
        """Classify this failure as transient or permanent."""
        return classify_remote_error(self)


class ContentGateway(Protocol):
    """Executes GraphQL operations against the remote content API."""

    def execute(self, operation: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run ``operation`` with ``variables`` and return the ``data`` object.

        Raises:
            RemoteGatewayError: On transport, HTTP or GraphQL level failures
        """
        ...


class ShopifyGraphQLGateway:
    """ContentGateway over the Shopify Admin GraphQL endpoint.

    Attributes:
        shop: Shop domain (``<name>.myshopify.com``)
        endpoint: GraphQL endpoint URL
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        shop: str,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.shop = shop
        self.endpoint = f"https://{shop}/admin/api/{api_version}/graphql.json"
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        self._logger = logger.bind(component="shopify_gateway", shop=shop)

    def execute(self, operation: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._session.post(
                self.endpoint,
                json={"query": operation, "variables": variables},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self._logger.warning("shopify_request_failed", error=str(e))
            raise RemoteGatewayError(f"Request to {self.shop} failed: {e}") from e

        if response.status_code >= 400:
            retry_after = response.headers.get("Retry-After")
            self._logger.warning(
                "shopify_http_error",
                status_code=response.status_code,
                retry_after=retry_after,
            )
            raise RemoteGatewayError(
                f"HTTP {response.status_code} from {self.shop}",
                status_code=response.status_code,
                retry_after=parse_retry_after(retry_after),
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteGatewayError(
                f"Invalid JSON from {self.shop}", status_code=response.status_code
            ) from e

        errors = body.get("errors")
        if errors:
            messages = "; ".join(
                error.get("message", str(error))
                if isinstance(error, dict)
                else str(error)
                for error in (errors if isinstance(errors, list) else [errors])
            )
            throttled = "THROTTLED" in str(errors)
            self._logger.warning(
                "shopify_graphql_errors", errors=messages, throttled=throttled
            )
            raise RemoteGatewayError(
                messages,
                status_code=429 if throttled else None,
                errors=errors if isinstance(errors, list) else [errors],
            )

        return body.get("data") or {}
