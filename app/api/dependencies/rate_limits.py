"""Request rate limiting.

One slowapi limiter is shared by every router. Routes are keyed by client
address, except the webhook receiver, which is keyed by the sending shop so
one busy shop cannot exhaust the budget of the others behind the same proxy.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from infrastructure.logging import get_module_logger
from modules.webhooks.verification import SHOP_HEADER

logger = get_module_logger()

limiter = Limiter(key_func=get_remote_address)


async def rate_limit_handler(request: Request, exc: Exception):
    if not isinstance(exc, RateLimitExceeded):
        raise exc
    logger.warning("rate_limit_exceeded", path=request.url.path)
    return JSONResponse(status_code=429, content={"message": "Rate limit exceeded"})


def webhook_key_func(request: Request) -> str:
    return request.headers.get(SHOP_HEADER) or get_remote_address(request)


def setup_rate_limiter(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


def get_limiter() -> Limiter:
    return limiter
