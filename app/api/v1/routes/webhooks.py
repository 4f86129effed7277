import json

from fastapi import APIRouter, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from api.dependencies.rate_limits import get_limiter, webhook_key_func
from infrastructure.logging import get_module_logger
from infrastructure.services import RetrySchedulerDep, SettingsDep
from modules.webhooks import deliver_webhook, verify_signature
from modules.webhooks.verification import HMAC_HEADER, SHOP_HEADER, TOPIC_HEADER

logger = get_module_logger()
router = APIRouter(tags=["Webhooks"])
limiter = get_limiter()


@router.post("/webhooks")
@limiter.limit("120/minute", key_func=webhook_key_func)
async def receive_webhook(
    request: Request,
    settings: SettingsDep,
    scheduler: RetrySchedulerDep,
):
    """Verify and deliver an inbound webhook.

    A failing handler does not fail the request: the delivery is recorded in
    the retry ledger and the response reports ``retry_scheduled``.
    Handlers and ledger writes run in the threadpool, off the event loop.

    Raises:
        HTTPException: 401 if the signature does not match, 400 if the topic
            or shop headers are missing or the body is not JSON.
    """
    body = await request.body()
    if not verify_signature(
        body, request.headers.get(HMAC_HEADER), settings.shopify.API_SECRET
    ):
        logger.warning(
            "webhook_signature_invalid",
            ip_address=request.client.host if request.client else "unknown",
        )
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    topic = request.headers.get(TOPIC_HEADER)
    shop = request.headers.get(SHOP_HEADER)
    if not topic or not shop:
        raise HTTPException(status_code=400, detail="Missing topic or shop header")

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("webhook_payload_invalid", topic=topic, shop=shop, error=str(e))
        raise HTTPException(status_code=400, detail="Invalid JSON payload") from e

    result = await run_in_threadpool(deliver_webhook, scheduler, shop, topic, payload)
    return result.model_dump(mode="json")
