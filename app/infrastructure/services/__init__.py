"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    RetrySchedulerDep,
    SettingsDep,
    TaskManagerDep,
)
from infrastructure.services.providers import (
    build_translation_orchestrator,
    get_clock,
    get_retry_scheduler,
    get_retry_store,
    get_settings,
    get_task_maintenance,
    get_task_manager,
    get_task_store,
    get_translation_mirror,
)

__all__ = [
    "RetrySchedulerDep",
    "SettingsDep",
    "TaskManagerDep",
    "build_translation_orchestrator",
    "get_clock",
    "get_retry_scheduler",
    "get_retry_store",
    "get_settings",
    "get_task_maintenance",
    "get_task_manager",
    "get_task_store",
    "get_translation_mirror",
]
