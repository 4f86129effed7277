"""Translatable field classification.

Short fields are translated for all target locales in one provider call.
Long fields are translated one locale at a time.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from infrastructure.logging import get_module_logger

logger = get_module_logger()

SHORT_FIELDS = ("title", "handle", "seo_title")
LONG_FIELDS = ("description", "meta_description")

# Field name → remote translatable content key
FIELD_KEY_MAP: Dict[str, str] = {
    "title": "title",
    "description": "body_html",
    "handle": "handle",
    "seo_title": "meta_title",
    "meta_description": "meta_description",
}


def translation_key(field_name: str) -> str:
    """Return the remote content key for a field name."""
    return FIELD_KEY_MAP.get(field_name, field_name)


@dataclass
class LocaleBatchPlan:
    """Partition of requested fields plus the running per-locale aggregate.

    Attributes:
        short_fields: Fields translated in one batched call for all locales
        long_fields: Fields translated per locale
        target_locales: Locales requested by the caller, in order
        translations: locale → field → translated value
        attempted: Steps attempted so far
        succeeded: Steps that produced at least one translation
    """

    short_fields: Dict[str, str]
    long_fields: Dict[str, str]
    target_locales: List[str]
    translations: Dict[str, Dict[str, str]] = field(default_factory=dict)
    attempted: int = 0
    succeeded: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @property
    def total_steps(self) -> int:
        short_steps = 1 if self.short_fields else 0
        long_steps = len(self.target_locales) if self.long_fields else 0
        return short_steps + long_steps

    @property
    def used_batch(self) -> bool:
        return bool(self.short_fields)

    @property
    def is_empty(self) -> bool:
        return not self.short_fields and not self.long_fields

    def record(self, locale: str, field_name: str, value: str) -> None:
        with self._lock:
            self.translations.setdefault(locale, {})[field_name] = value

    def finish_step(self, succeeded: bool) -> int:
        """Count a finished step and return the number of steps done so far."""
        with self._lock:
            self.attempted += 1
            if succeeded:
                self.succeeded += 1
            return self.attempted

    def processed_locales(self) -> List[str]:
        """Locales with at least one translated field, in request order."""
        with self._lock:
            return [
                locale
                for locale in self.target_locales
                if self.translations.get(locale)
            ]


def partition_fields(
    fields: Mapping[str, Optional[str]],
    target_locales: Iterable[str],
    short_fields: Iterable[str] = SHORT_FIELDS,
    long_fields: Iterable[str] = LONG_FIELDS,
) -> LocaleBatchPlan:
    """Split non-empty fields into the batched and the per-locale sets.

    Fields that are neither short nor long are ignored and logged.
    """
    short_names = set(short_fields)
    long_names = set(long_fields)
    short: Dict[str, str] = {}
    long: Dict[str, str] = {}

    for name, value in fields.items():
        if not value or not str(value).strip():
            continue
        if name in short_names:
            short[name] = value
        elif name in long_names:
            long[name] = value
        else:
            logger.warning("translation_field_unsupported", field=name)

    return LocaleBatchPlan(
        short_fields=short,
        long_fields=long,
        target_locales=list(target_locales),
    )
