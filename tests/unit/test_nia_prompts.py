"""Unit tests for Nia prompt construction and the answer cache."""

from __future__ import annotations

from niabridge.nia.cache import QueryCache, normalise_query_key
from niabridge.nia.prompts import (
    build_analysis_prompt,
    build_simplified_prompt,
    strip_punctuation,
)


class TestPrompts:
    """Tests for the primary and simplified prompt builders."""

    def test_analysis_prompt_restricts_context_to_repository(self) -> None:
        """The primary prompt names the repository as the only context."""
        prompt = build_analysis_prompt("acme/widgets", "Add retry", "Flaky sync")

        assert "Use ONLY the repository acme/widgets as context" in prompt
        assert "Issue title: Add retry" in prompt
        assert "Flaky sync" in prompt

    def test_analysis_prompt_omits_blank_description(self) -> None:
        """Blank descriptions leave no description block behind."""
        prompt = build_analysis_prompt("acme/widgets", "Add retry", "   ")

        assert "Issue description" not in prompt

    def test_simplified_prompt_strips_punctuation(self) -> None:
        """The fallback query is title and repository without punctuation."""
        prompt = build_simplified_prompt("acme/widgets", "Fix: crash (on start)!")

        assert prompt == "How to implement Fix crash on start in acme/widgets"

    def test_strip_punctuation_collapses_whitespace(self) -> None:
        """Removed punctuation does not leave double spaces."""
        assert strip_punctuation("a -- b,,  c") == "a b c"


class TestQueryCache:
    """Tests for the title-keyed answer cache."""

    def test_key_is_trimmed_and_lowercased(self) -> None:
        """Keys ignore surrounding whitespace and case."""
        assert normalise_query_key("  Add Retry ") == "add retry"

    def test_equivalent_titles_share_an_entry(self) -> None:
        """Titles differing only in case or padding hit the same entry."""
        cache = QueryCache()
        cache.put("Add Retry", "Use a queue.")

        assert cache.get(" add retry ") == "Use a queue."
        assert len(cache) == 1

    def test_miss_returns_none(self) -> None:
        """Unknown titles are cache misses."""
        assert QueryCache().get("Add retry") is None
