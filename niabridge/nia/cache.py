"""In-memory cache of Nia answers keyed by normalised issue title."""

from __future__ import annotations


def normalise_query_key(title: str) -> str:
    """Return the cache key for an issue title (trimmed, lower-cased)."""
    return title.strip().lower()


class QueryCache:
    """Map normalised issue titles to analysis text.

    Entries are never evicted, so the cache grows with the number of distinct
    titles seen by the process.
    """

    def __init__(self) -> None:
        """Start with an empty cache."""
        self._entries: dict[str, str] = {}

    def __len__(self) -> int:
        """Return the number of cached answers."""
        return len(self._entries)

    def get(self, title: str) -> str | None:
        """Return the cached answer for ``title``, if any."""
        return self._entries.get(normalise_query_key(title))

    def put(self, title: str, analysis: str) -> None:
        """Store ``analysis`` under the normalised ``title``."""
        self._entries[normalise_query_key(title)] = analysis
