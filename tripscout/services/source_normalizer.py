from __future__ import annotations

from typing import Any, Iterable

from tripscout.models.search import Source


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def normalize_source(item: Any) -> Source | None:
    """Map one raw provider document to a Source, or ``None`` without a URL."""
    if not isinstance(item, dict):
        return None
    url = _text(item.get("url"))
    if url is None:
        return None

    metadata = item.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    return Source(
        url=url,
        title=_text(item.get("title")) or url,
        description=_text(item.get("description")) or _text(metadata.get("description")),
        content=_text(item.get("content")),
        markdown=_text(item.get("markdown")),
        published_date=_text(item.get("publishedDate")),
        author=_text(item.get("author")),
        image=_text(metadata.get("ogImage")) or _text(metadata.get("image")),
        favicon=_text(metadata.get("favicon")),
        site_name=_text(metadata.get("siteName")),
    )


def normalize_sources(items: Iterable[Any]) -> tuple[Source, ...]:
    """Order-preserving; documents lacking a URL are dropped, not repaired."""
    normalized = (normalize_source(item) for item in items)
    return tuple(source for source in normalized if source is not None)
