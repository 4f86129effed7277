"""Resolution of the AI translation provider for API routes."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from modules.translation import TranslationProvider


def get_translation_provider(request: Request) -> TranslationProvider:
    """Return the provider installed on ``app.state`` at startup.

    Raises:
        HTTPException: 503 when no provider is configured
    """
    provider = getattr(request.app.state, "translation_provider", None)
    if provider is None:
        raise HTTPException(
            status_code=503, detail="No translation provider is configured"
        )
    return provider


TranslationProviderDep = Annotated[
    TranslationProvider, Depends(get_translation_provider)
]
