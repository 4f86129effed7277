"""Translation provider boundary.

Concrete AI provider clients live outside this service; they only need to
satisfy the TranslationProvider protocol.
"""

from typing import Dict, List, Protocol


class TranslationProviderError(Exception):
    """Raised by providers when a translation request fails."""


class TranslationProvider(Protocol):
    """AI translation provider."""

    def translate_batch(
        self,
        fields: Dict[str, str],
        source_locale: str,
        target_locales: List[str],
    ) -> Dict[str, Dict[str, str]]:
        """Translate every field into every target locale in one request.

        Returns:
            locale → field → translated value. Missing locales or fields mean
            the provider produced nothing for them.
        """
        ...

    def translate_single_locale(
        self,
        fields: Dict[str, str],
        target_locale: str,
        source_locale: str,
    ) -> Dict[str, str]:
        """Translate every field into one locale.

        Returns:
            field → translated value
        """
        ...
