"""Structlog configuration for the translation service.

Every log line carries the service name, the deployed git SHA and whatever
request context (correlation id, shop, task id) is bound at the time.
Credential-looking keys are masked and oversized values truncated before
rendering. Development renders to the console, production to JSON.

Usage:
    from infrastructure.logging import get_module_logger

    logger = get_module_logger()
    logger.info("task_created", task_id=task.id)
"""

import inspect
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.configuration import settings
from infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)

APP_NAME = "content-translation-service"
SILENT_LEVEL = logging.CRITICAL + 1


def _is_test_environment() -> bool:
    """True when running under pytest."""
    return "pytest" in sys.modules


def build_processors(production: bool, git_sha: str) -> List[Any]:
    """Return the structlog processor chain, renderer last."""
    callsite = structlog.processors.CallsiteParameterAdder(
        parameters=[
            structlog.processors.CallsiteParameter.FILENAME,
            structlog.processors.CallsiteParameter.LINENO,
            structlog.processors.CallsiteParameter.FUNC_NAME,
        ]
    )
    renderer = (
        structlog.processors.JSONRenderer()
        if production
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        callsite,
        add_app_info(APP_NAME, git_sha),
        mask_sensitive_data(),
        truncate_large_values(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structlog and the stdlib root logger.

    Under pytest every record is dropped: the root logger is raised above
    CRITICAL and only the minimal processors needed to build records run.

    Args:
        log_level: Level name overriding ``settings.LOG_LEVEL``.
        is_production: Overrides ``settings.is_production``; selects JSON
            rather than console rendering.

    Returns:
        The configured root structlog logger.
    """
    if _is_test_environment():
        processors: List[Any] = [
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]
        level = SILENT_LEVEL
        force = True
    else:
        production = (
            settings.is_production if is_production is None else is_production
        )
        processors = build_processors(production, settings.GIT_SHA)
        level_name = (log_level or settings.LOG_LEVEL).upper()
        level = getattr(logging, level_name, logging.INFO)
        force = False

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=level, force=force)
    if force:
        logging.root.setLevel(level)

    return structlog.stdlib.get_logger()


logger: BoundLogger = configure_logging()


def _caller_module_name(depth: int = 2) -> Optional[str]:
    frame = inspect.currentframe()
    for _ in range(depth):
        if frame is None:
            return None
        frame = frame.f_back
    if frame is None:
        return None
    module = inspect.getmodule(frame)
    return module.__name__ if module else None


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """Logger bound to ``name``, or to the calling module's name."""
    return logger.bind(logger_name=name or _caller_module_name() or "unknown")


def get_module_logger() -> BoundLogger:
    """Logger bound to the calling module.

    Binds ``component`` (last dotted segment) and ``module_path``, so a
    logger created in ``infrastructure/tasks/lifecycle.py`` logs with
    ``component="lifecycle"``.
    """
    module_name = _caller_module_name()
    if module_name is None:
        return logger.bind(component="unknown")
    return logger.bind(
        component=module_name.rsplit(".", 1)[-1], module_path=module_name
    )
