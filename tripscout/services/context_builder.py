from __future__ import annotations

from typing import Sequence

from tripscout.models.search import CONTEXT_CHARS_PER_SOURCE, Source
from tripscout.tools.content_selection import select_relevant_content

SOURCE_SEPARATOR = "\n\n---\n\n"


def citation_block(index: int, source: Source, query: str) -> str:
    excerpt = select_relevant_content(source.body, query, CONTEXT_CHARS_PER_SOURCE)
    return f"[{index}] {source.title}\nURL: {source.url}\n{excerpt}"


def build_context(sources: Sequence[Source], query: str) -> str:
    """Concatenate citation blocks numbered 1..N in source order.

    The numbering is what the model cites as ``[1]``, ``[2]``..., so it must
    follow the order of the ``sources`` event sent to the client.
    """
    return SOURCE_SEPARATOR.join(
        citation_block(index, source, query)
        for index, source in enumerate(sources, start=1)
    )
