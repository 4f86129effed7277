"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.retry import RetrySettings
from infrastructure.configuration.infrastructure.tasks import TaskSettings

__all__ = [
    "RetrySettings",
    "TaskSettings",
]
