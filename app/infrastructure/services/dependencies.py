"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated

from fastapi import Depends

from infrastructure.configuration import Settings
from infrastructure.resilience.retry import RetryScheduler
from infrastructure.services.providers import (
    get_retry_scheduler,
    get_settings,
    get_task_manager,
)
from infrastructure.tasks import TaskLifecycleManager

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Task lifecycle manager dependency
TaskManagerDep = Annotated[TaskLifecycleManager, Depends(get_task_manager)]

# Retry scheduler dependency (handler registry, ledger and stats)
RetrySchedulerDep = Annotated[RetryScheduler, Depends(get_retry_scheduler)]

__all__ = [
    "SettingsDep",
    "TaskManagerDep",
    "RetrySchedulerDep",
]
