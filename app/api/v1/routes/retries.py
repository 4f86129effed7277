from typing import Optional

from fastapi import APIRouter, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.services import RetrySchedulerDep

router = APIRouter(tags=["Retries"])
limiter = get_limiter()


@router.get("/retries/stats")
@limiter.limit("30/minute")
def get_retry_stats(
    request: Request,  # pylint: disable=unused-argument
    scheduler: RetrySchedulerDep,
    shop: Optional[str] = None,
):
    """Return pending retry counts, optionally for one shop."""
    return scheduler.get_stats(shop)
