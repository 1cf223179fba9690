from __future__ import annotations

from typing import Any

import httpx

from tripscout.config import settings
from tripscout.errors import SearchProviderError
from tripscout.models.search import SearchConfiguration

SEARCH_PATH = "/v1/search"

# Request time range -> Google-style "tbs" freshness filter understood by Firecrawl.
TBS_MAP = {
    "1d": "qdr:d",
    "7d": "qdr:w",
    "30d": "qdr:m",
}


def build_payload(query: str, config: SearchConfiguration) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "query": query,
        "limit": config.limit,
        "scrapeOptions": {
            "formats": list(config.formats),
            "onlyMainContent": config.only_main_content,
        },
    }
    page_options: dict[str, Any] = {}
    if config.time_range and config.time_range != "all":
        page_options["timePublished"] = config.time_range
        if config.time_range in TBS_MAP:
            payload["tbs"] = TBS_MAP[config.time_range]
    if config.include_paths:
        page_options["includePaths"] = list(config.include_paths)
    if page_options:
        payload["pageOptions"] = page_options
    return payload


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message")
        if isinstance(detail, str) and detail:
            return detail
    return f"Firecrawl search failed with HTTP {response.status_code}"


async def search(
    query: str,
    config: SearchConfiguration,
    *,
    api_key: str,
) -> list[dict[str, Any]]:
    """Run a Firecrawl search and return the raw result documents.

    Results keep the provider's shape; normalization happens downstream.
    """
    if not api_key:
        raise SearchProviderError("Firecrawl API key not configured", status_code=401)

    endpoint = settings.firecrawl_base_url.rstrip("/") + SEARCH_PATH
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }

    try:
        async with httpx.AsyncClient(timeout=settings.search_timeout_seconds) as client:
            response = await client.post(endpoint, json=build_payload(query, config), headers=headers)
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPStatusError as exc:
        raise SearchProviderError(
            _error_message(exc.response),
            status_code=exc.response.status_code,
        ) from exc
    except httpx.TimeoutException as exc:
        raise SearchProviderError("Firecrawl search timed out", status_code=504) from exc
    except httpx.HTTPError as exc:
        raise SearchProviderError(f"Firecrawl search request failed: {exc}") from exc

    if not isinstance(payload, dict):
        return []
    if payload.get("success") is False:
        raise SearchProviderError(str(payload.get("error") or "Firecrawl search failed"))
    data = payload.get("data") or []
    return [item for item in data if isinstance(item, dict)]
