from __future__ import annotations

from fastapi import HTTPException, status

from tripscout.config import settings
from tripscout.llm_client import has_credentials
from tripscout.models.schemas import ModelProvider, SearchRequest


def get_available_models() -> list[dict[str, str]]:
    """Return the answer backends a request may select."""
    return [
        {
            "id": ModelProvider.OPENAI.value,
            "name": f"OpenAI {settings.openai_model}",
            "description": "Default backend. Fast, well-rounded travel answers.",
        },
        {
            "id": ModelProvider.DEEPSEEK.value,
            "name": f"DeepSeek {settings.deepseek_model}",
            "description": "Alternative OpenAI-compatible backend.",
        },
    ]


def resolve_search_api_key(request: SearchRequest) -> str:
    """A key sent with the request takes precedence over the server's own."""
    api_key = (request.firecrawl_api_key or "").strip() or settings.firecrawl_api_key
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Firecrawl API key not configured",
        )
    return api_key


def ensure_model_credentials(provider: ModelProvider) -> None:
    if not has_credentials(provider):
        name = "DeepSeek" if provider is ModelProvider.DEEPSEEK else "OpenAI"
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{name} API key not configured",
        )
    # Follow-up questions always come from OpenAI.
    if provider is not ModelProvider.OPENAI and not has_credentials(ModelProvider.OPENAI):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="OpenAI API key not configured",
        )
