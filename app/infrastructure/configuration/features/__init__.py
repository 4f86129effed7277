"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.translation import (
    TranslationFeatureSettings,
)

__all__ = [
    "TranslationFeatureSettings",
]
