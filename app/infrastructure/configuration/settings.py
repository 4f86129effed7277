"""Top-level settings object.

Each concern has its own settings class, loaded from its own environment
variables; ``Settings`` only groups them and carries the few application
wide values.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from infrastructure.configuration.features import TranslationFeatureSettings
from infrastructure.configuration.infrastructure import RetrySettings, TaskSettings
from infrastructure.configuration.integrations import AwsSettings, ShopifySettings


class Settings(BaseSettings):
    """Service configuration.

    Sections:
        aws, shopify: external services
        translation: bulk translation feature
        tasks, retry: task tracking and webhook redelivery

    Environment Variables:
        PREFIX: Deployment prefix; empty in production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Deployed commit, reported by /version and in every log line

    Tests pass section instances directly:
        Settings(retry=RetrySettings(RETRY_ENABLED=False))
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    aws: AwsSettings = Field(default_factory=AwsSettings)
    shopify: ShopifySettings = Field(default_factory=ShopifySettings)
    translation: TranslationFeatureSettings = Field(
        default_factory=TranslationFeatureSettings
    )
    tasks: TaskSettings = Field(default_factory=TaskSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return not self.PREFIX


settings = Settings()
