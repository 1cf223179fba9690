from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Fixed by the stream protocol, not tunable per deployment.
SEARCH_RESULT_LIMIT = 6
CONTEXT_CHARS_PER_SOURCE = 2000
MAX_FOLLOW_UP_QUESTIONS = 5


@dataclass(frozen=True, slots=True)
class Source:
    """A normalized web document surfaced by search."""

    url: str
    title: str
    description: str | None = None
    content: str | None = None
    markdown: str | None = None
    published_date: str | None = None
    author: str | None = None
    image: str | None = None
    favicon: str | None = None
    site_name: str | None = None

    @property
    def body(self) -> str:
        return self.markdown or self.content or ""

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "markdown": self.markdown,
            "publishedDate": self.published_date,
            "author": self.author,
            "image": self.image,
            "favicon": self.favicon,
            "siteName": self.site_name,
        }
        return {k: v for k, v in payload.items() if v is not None}


@dataclass(frozen=True, slots=True)
class SearchConfiguration:
    """Options handed to the search provider, built once per request."""

    limit: int = SEARCH_RESULT_LIMIT
    formats: tuple[str, ...] = ("markdown",)
    only_main_content: bool = True
    time_range: str | None = None
    include_paths: tuple[str, ...] = ()
