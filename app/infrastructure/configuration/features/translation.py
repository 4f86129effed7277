"""Bulk translation feature settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import FeatureSettings


class TranslationFeatureSettings(FeatureSettings):
    """Bulk translation configuration.

    Short fields are translated for every target locale in one provider call;
    long fields are translated one locale at a time.

    Environment Variables:
        TRANSLATION_SHORT_FIELDS: JSON list of batched fields
        TRANSLATION_LONG_FIELDS: JSON list of per-locale fields
        TRANSLATION_DEFAULT_SOURCE_LOCALE: Source locale when none is given (default: de)
        TRANSLATION_DEFAULT_TARGET_LOCALES: JSON list of target locales
        TRANSLATION_MAX_CONCURRENCY: Parallel locales in the long-field phase (1-5)
        TRANSLATION_MIRROR_BACKEND: Local mirror backend - 'memory' or 'dynamodb'
        TRANSLATION_MIRROR_TABLE_NAME: DynamoDB table for mirrored translations
    """

    short_fields: list[str] = Field(
        default=["title", "handle", "seo_title"], alias="TRANSLATION_SHORT_FIELDS"
    )
    long_fields: list[str] = Field(
        default=["description", "meta_description"], alias="TRANSLATION_LONG_FIELDS"
    )
    default_source_locale: str = Field(
        default="de", alias="TRANSLATION_DEFAULT_SOURCE_LOCALE"
    )
    default_target_locales: list[str] = Field(
        default=["en", "fr", "es", "it"], alias="TRANSLATION_DEFAULT_TARGET_LOCALES"
    )
    max_concurrency: int = Field(default=1, alias="TRANSLATION_MAX_CONCURRENCY")
    mirror_backend: str = Field(default="memory", alias="TRANSLATION_MIRROR_BACKEND")
    mirror_table_name: str = Field(
        default="content-translations", alias="TRANSLATION_MIRROR_TABLE_NAME"
    )

    @field_validator("max_concurrency")
    @classmethod
    def validate_concurrency(cls, value: int) -> int:
        if not 1 <= value <= 5:
            raise ValueError("TRANSLATION_MAX_CONCURRENCY must be between 1 and 5")
        return value
