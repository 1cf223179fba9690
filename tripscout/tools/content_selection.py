"""Query-biased excerpt selection for building model context."""

from __future__ import annotations

import re

from rank_bm25 import BM25Okapi

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_TOKEN = re.compile(r"\w+")


def _tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text.lower())


def _split_paragraphs(text: str) -> list[str]:
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text)]
    return [p for p in paragraphs if _tokenize(p)]


def _score_paragraphs(query: str, paragraphs: list[str]) -> list[float]:
    """
    BM25 score per paragraph against the query.

    The opening paragraph gets a small bonus since pages usually lead with
    their summary.
    """
    query_tokens = _tokenize(query)
    if not query_tokens:
        return [0.0] * len(paragraphs)
    bm25 = BM25Okapi([_tokenize(p) for p in paragraphs])
    scores = [float(s) for s in bm25.get_scores(query_tokens)]
    if scores:
        scores[0] += 0.1 * (max(scores) or 1.0)
    return scores


def select_relevant_content(text: str, query: str, max_chars: int) -> str:
    """Return at most ``max_chars`` characters of ``text``, favouring query-relevant paragraphs.

    Short inputs come back unchanged. Otherwise the best scoring paragraphs
    are taken until the budget is spent and emitted in their original order.
    """
    if not text or max_chars <= 0:
        return ""
    text = text.strip()
    if len(text) <= max_chars:
        return text

    paragraphs = _split_paragraphs(text)
    if not paragraphs:
        return ""

    scores = _score_paragraphs(query, paragraphs)
    ranked = sorted(range(len(paragraphs)), key=lambda i: scores[i], reverse=True)

    separator = "\n\n"
    chosen: list[int] = []
    used = 0
    for idx in ranked:
        cost = len(paragraphs[idx]) + (len(separator) if chosen else 0)
        if used + cost > max_chars:
            continue
        chosen.append(idx)
        used += cost

    if not chosen:
        # Every paragraph is over budget on its own; cut the best one.
        return paragraphs[ranked[0]][:max_chars]

    return separator.join(paragraphs[i] for i in sorted(chosen))
