"""Unversioned routes polled by the load balancer and deploy tooling."""

from fastapi import APIRouter, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.services import SettingsDep

router = APIRouter(tags=["System"])
limiter = get_limiter()

HEALTH_CHECK_LIMIT = "50/minute"


@router.get("/version")
@limiter.limit(HEALTH_CHECK_LIMIT)
def get_version(request: Request, settings: SettingsDep):  # pylint: disable=unused-argument
    """Deployed git SHA."""
    return {"version": settings.GIT_SHA}


@router.get("/health")
@limiter.limit(HEALTH_CHECK_LIMIT)
def get_health(request: Request):  # pylint: disable=unused-argument
    return {"status": "ok"}
