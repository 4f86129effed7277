"""Infrastructure configuration module - public API.

Centralized configuration management using Pydantic BaseSettings with
domain-based organization.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    RetrySettings: Retry ledger settings class
    TaskSettings: Task tracking settings class
    TranslationFeatureSettings: Bulk translation settings class

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    max_attempts = settings.retry.max_attempts
    expiry_days = settings.tasks.expiry_days
    ```
"""

from infrastructure.configuration.settings import Settings, settings
from infrastructure.configuration.infrastructure.retry import RetrySettings
from infrastructure.configuration.infrastructure.tasks import TaskSettings
from infrastructure.configuration.features.translation import (
    TranslationFeatureSettings,
)

__all__ = [
    "settings",
    "Settings",
    "RetrySettings",
    "TaskSettings",
    "TranslationFeatureSettings",
]
