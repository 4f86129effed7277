"""Webhook signature verification.

Shopify signs the raw request body with HMAC-SHA256 using the app's API
secret and sends the base64 digest in ``X-Shopify-Hmac-Sha256``.
"""

import base64
import hashlib
import hmac
from typing import Optional

HMAC_HEADER = "X-Shopify-Hmac-Sha256"
TOPIC_HEADER = "X-Shopify-Topic"
SHOP_HEADER = "X-Shopify-Shop-Domain"


def compute_signature(body: bytes, secret: str) -> str:
    """Return the base64 HMAC-SHA256 digest of ``body``."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """Check a webhook signature in constant time.

    Returns False when the signature or the secret is missing. Digests are
    compared as bytes so a header with non-ASCII characters is simply a
    mismatch.
    """
    if not signature or not secret:
        return False
    expected = compute_signature(body, secret)
    return hmac.compare_digest(
        expected.encode("utf-8"), signature.strip().encode("utf-8", "ignore")
    )
