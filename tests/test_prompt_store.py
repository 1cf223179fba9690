from __future__ import annotations

import pytest

from tripscout.services.prompt_store import clear_prompt_cache, render_prompt


def test_render_prompt_substitutes_template_values():
    prompt = render_prompt("answer.user", query="best beaches in Bali", context="[1] Beaches")
    assert prompt.startswith('Answer this query: "best beaches in Bali"')
    assert prompt.endswith("Based on these sources:\n[1] Beaches")


def test_render_prompt_joins_line_lists():
    prompt = render_prompt("answer.system_initial")
    assert prompt.startswith("You are 'Trip-Advisor AI'")
    assert "\nFORMAT:\n" in prompt
    assert "[1], [2]" in prompt


def test_render_prompt_raises_for_unknown_key():
    with pytest.raises(KeyError):
        render_prompt("missing.prompt.key")


def test_render_prompt_reports_missing_value():
    with pytest.raises(KeyError, match="query"):
        render_prompt("answer.user", context="x")


def test_clear_prompt_cache_reloads_catalog():
    first = render_prompt("status.searching")
    clear_prompt_cache()
    assert render_prompt("status.searching") == first == "Searching for relevant sources..."
