"""Base classes for settings sections.

Every section reads the process environment and ``.env`` with
case-sensitive names and ignores variables that belong to other sections.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class SectionSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class IntegrationSettings(SectionSettings):
    """External services (AWS, Shopify)."""


class FeatureSettings(SectionSettings):
    """Feature modules (bulk translation)."""


class InfrastructureSettings(SectionSettings):
    """Core behavior: task tracking, retry scheduling, storage backends."""
