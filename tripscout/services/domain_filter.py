"""Restrict search results to a caller-supplied domain allow-list.

Filtering happens twice. The include-path globs built here are only a hint to
the search provider, whose glob matching is not exact about hosts. The second
pass over the returned URLs is what actually enforces the allow-list.
"""
from __future__ import annotations

from typing import Any, Iterable, Sequence
from urllib.parse import urlparse


def expand_domain_globs(domains: Iterable[str]) -> tuple[str, ...]:
    """Bare host, any subdomain and ``www`` variants for every domain."""
    globs: list[str] = []
    for domain in domains:
        globs.append(f"*://{domain}/**")
        globs.append(f"*://*.{domain}/**")
        globs.append(f"*://www.{domain}/**")
    return tuple(globs)


def host_matches(hostname: str, domain: str) -> bool:
    domain = domain.lower()
    return (
        hostname == domain
        or hostname == f"www.{domain}"
        or hostname.endswith(f".{domain}")
    )


def url_in_domains(url: str, domains: Sequence[str]) -> bool:
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return False
    if not hostname:
        return False
    return any(host_matches(hostname, domain) for domain in domains)


def filter_by_domains(
    results: Sequence[dict[str, Any]],
    domains: Sequence[str],
) -> list[dict[str, Any]]:
    """Keep raw results whose URL host falls inside ``domains``.

    An empty allow-list keeps everything.
    """
    if not domains:
        return list(results)
    kept: list[dict[str, Any]] = []
    for item in results:
        url = item.get("url") if isinstance(item, dict) else None
        if isinstance(url, str) and url and url_in_domains(url, domains):
            kept.append(item)
    return kept


def filtered_everything(
    raw: Sequence[Any],
    filtered: Sequence[Any],
    domains: Sequence[str],
) -> bool:
    """True when the allow-list alone turned a non-empty result set empty."""
    return bool(domains) and bool(raw) and not filtered
