from contextlib import asynccontextmanager
import sys
import threading
from typing import AsyncIterator, Optional, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.resilience.retry import RetryScheduler
from infrastructure.services import (
    get_retry_scheduler,
    get_settings,
    get_task_maintenance,
    get_translation_mirror,
)
from infrastructure.tasks import TaskMaintenance, TaskPersistenceError
from jobs import scheduled_tasks
from modules.webhooks import register_default_handlers

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _is_test_environment() -> bool:
    """Detect if running in a test environment."""
    return "pytest" in sys.modules


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


def _recover_stuck_tasks(maintenance: TaskMaintenance, logger: BoundLogger) -> None:
    """Fail tasks left running by a previous process."""
    try:
        failed = maintenance.fail_stuck_tasks()
    except TaskPersistenceError as exc:
        logger.error("stuck_task_recovery_failed", error=str(exc))
        return
    logger.info("stuck_task_recovery_completed", failed=failed)


def _start_retry_scheduler(
    scheduler: RetryScheduler, settings: "Settings", logger: BoundLogger
) -> bool:
    if not settings.retry.enabled:
        logger.info("retry_scheduler_skipped", reason="disabled")
        return False
    if _is_test_environment():
        logger.info("retry_scheduler_skipped", reason="test_environment")
        return False
    scheduler.start()
    return True


def _start_scheduled_tasks(
    maintenance: TaskMaintenance,
    settings: "Settings",
    logger: BoundLogger,
) -> Optional[threading.Event]:
    if settings.PREFIX != "":
        logger.info("scheduled_tasks_skipped", reason="prefix_not_empty")
        return None
    if _is_test_environment():
        logger.info("scheduled_tasks_skipped", reason="test_environment")
        return None

    scheduled_tasks.init(maintenance, settings.tasks)
    stop_event = scheduled_tasks.run_continuously()
    logger.info("scheduled_tasks_started")
    return stop_event


def _stop_scheduled_tasks(stop_event: Optional[threading.Event]) -> None:
    if stop_event is None:
        return
    stop_event.set()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    maintenance = get_task_maintenance()
    retry_scheduler = get_retry_scheduler()
    register_default_handlers(retry_scheduler, get_translation_mirror())
    app.state.retry_scheduler = retry_scheduler

    # Concrete AI providers are installed by the deployment, e.g. from a wrapper app.
    if not hasattr(app.state, "translation_provider"):
        app.state.translation_provider = None

    _recover_stuck_tasks(maintenance, logger)

    app.state.retry_scheduler_started = _start_retry_scheduler(
        retry_scheduler, settings, logger
    )
    app.state.scheduled_stop_event = _start_scheduled_tasks(
        maintenance, settings, logger
    )

    yield

    logger.info("application_shutdown")

    _stop_scheduled_tasks(app.state.scheduled_stop_event)

    if app.state.retry_scheduler_started:
        retry_scheduler.stop()
