from fastapi import APIRouter

from api.v1.routes.retries import router as retries_router
from api.v1.routes.tasks import router as tasks_router
from api.v1.routes.translations import router as translations_router
from api.v1.routes.webhooks import router as webhooks_router

router = APIRouter()
router.include_router(tasks_router)
router.include_router(translations_router)
router.include_router(webhooks_router)
router.include_router(retries_router)
