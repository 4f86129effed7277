from typing import Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from pydantic import BaseModel, Field

from api.dependencies.rate_limits import get_limiter
from api.dependencies.translation import TranslationProviderDep
from infrastructure.logging import get_module_logger
from infrastructure.services import SettingsDep, build_translation_orchestrator
from infrastructure.tasks import TaskPersistenceError

logger = get_module_logger()
router = APIRouter(tags=["Translations"])
limiter = get_limiter()


class BulkTranslationRequest(BaseModel):
    shop: str = Field(..., min_length=1)
    resource_id: str = Field(..., min_length=1)
    fields: Dict[str, Optional[str]]
    source_locale: Optional[str] = None
    target_locales: Optional[List[str]] = None


class FieldTranslationRequest(BaseModel):
    shop: str = Field(..., min_length=1)
    resource_id: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1)
    source_text: str
    source_locale: Optional[str] = None
    target_locales: Optional[List[str]] = None


class TaskAccepted(BaseModel):
    task_id: str
    status: str


@router.post("/translations/bulk", status_code=202, response_model=TaskAccepted)
@limiter.limit("10/minute")
def start_bulk_translation(
    request: Request,  # pylint: disable=unused-argument
    body: BulkTranslationRequest,
    background_tasks: BackgroundTasks,
    settings: SettingsDep,
    provider: TranslationProviderDep,
):
    """Create a bulk translation task and run it in the background.

    The response carries the task id to poll on ``GET /tasks/{task_id}``.
    """
    source_locale = body.source_locale or settings.translation.default_source_locale
    target_locales = (
        body.target_locales
        if body.target_locales is not None
        else list(settings.translation.default_target_locales)
    )
    orchestrator = build_translation_orchestrator(body.shop, provider)

    try:
        task = orchestrator.create_bulk_task(
            body.shop, body.resource_id, body.fields, target_locales
        )
    except TaskPersistenceError as e:
        logger.error("bulk_translation_task_creation_failed", shop=body.shop, error=str(e))
        raise HTTPException(status_code=503, detail="Task store unavailable") from e

    background_tasks.add_task(
        orchestrator.execute_bulk_translation,
        task.id,
        body.shop,
        body.resource_id,
        body.fields,
        source_locale,
        target_locales,
    )
    logger.info(
        "bulk_translation_accepted",
        shop=body.shop,
        task_id=task.id,
        resource_id=body.resource_id,
    )
    return TaskAccepted(task_id=task.id, status=task.status.value)


@router.post("/translations/field", status_code=202, response_model=TaskAccepted)
@limiter.limit("10/minute")
def start_field_translation(
    request: Request,  # pylint: disable=unused-argument
    body: FieldTranslationRequest,
    background_tasks: BackgroundTasks,
    settings: SettingsDep,
    provider: TranslationProviderDep,
):
    """Translate a single field into every target locale in the background."""
    source_locale = body.source_locale or settings.translation.default_source_locale
    target_locales = (
        body.target_locales
        if body.target_locales is not None
        else list(settings.translation.default_target_locales)
    )
    orchestrator = build_translation_orchestrator(body.shop, provider)

    try:
        task = orchestrator.create_field_task(
            body.shop, body.resource_id, body.field, target_locales
        )
    except TaskPersistenceError as e:
        logger.error("field_translation_task_creation_failed", shop=body.shop, error=str(e))
        raise HTTPException(status_code=503, detail="Task store unavailable") from e

    background_tasks.add_task(
        orchestrator.execute_field_translation,
        task.id,
        body.shop,
        body.resource_id,
        body.field,
        body.source_text,
        source_locale,
        target_locales,
    )
    return TaskAccepted(task_id=task.id, status=task.status.value)
