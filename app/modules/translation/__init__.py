"""Bulk translation of content resources into many locales."""

from modules.translation.fields import (
    FIELD_KEY_MAP,
    LONG_FIELDS,
    SHORT_FIELDS,
    LocaleBatchPlan,
    partition_fields,
    translation_key,
)
from modules.translation.mirror import (
    DynamoDBTranslationMirror,
    InMemoryTranslationMirror,
    TranslationMirror,
    TranslationMirrorRecord,
    create_translation_mirror,
)
from modules.translation.orchestrator import (
    NO_FIELDS_MESSAGE,
    NOTHING_TRANSLATED_MESSAGE,
    BulkTranslationOrchestrator,
    TranslationReport,
)
from modules.translation.providers import (
    TranslationProvider,
    TranslationProviderError,
)

__all__ = [
    "FIELD_KEY_MAP",
    "LONG_FIELDS",
    "NOTHING_TRANSLATED_MESSAGE",
    "NO_FIELDS_MESSAGE",
    "SHORT_FIELDS",
    "BulkTranslationOrchestrator",
    "DynamoDBTranslationMirror",
    "InMemoryTranslationMirror",
    "LocaleBatchPlan",
    "TranslationMirror",
    "TranslationMirrorRecord",
    "TranslationProvider",
    "TranslationProviderError",
    "TranslationReport",
    "create_translation_mirror",
    "partition_fields",
    "translation_key",
]
