"""In-memory idempotency tracking for issues handled by the relay."""

from __future__ import annotations

import typing as typ

from niabridge.common.time import utcnow

if typ.TYPE_CHECKING:
    import datetime as dt

    from niabridge.common.time import Clock


class IdempotencyTracker:
    """Record issue ids that are in flight or already handled.

    An id stays tracked until it is released (failed or empty analysis) or
    until eviction drops it after the retention window. All operations are
    synchronous so that a caller can check and mark an id without yielding to
    the event loop in between.

    Parameters
    ----------
    clock
        Source of aware UTC timestamps; overridable in tests.

    """

    def __init__(self, *, clock: Clock = utcnow) -> None:
        """Start with no tracked issues."""
        self._clock = clock
        self._entries: dict[str, dt.datetime] = {}

    def __len__(self) -> int:
        """Return the number of tracked issue ids."""
        return len(self._entries)

    def __contains__(self, issue_id: object) -> bool:
        """Support ``issue_id in tracker``."""
        return issue_id in self._entries

    def has(self, issue_id: str) -> bool:
        """Return True when ``issue_id`` is tracked."""
        return issue_id in self._entries

    def mark(self, issue_id: str) -> None:
        """Track ``issue_id`` as of now, replacing any earlier timestamp."""
        self._entries[issue_id] = self._clock()

    def release(self, issue_id: str) -> None:
        """Stop tracking ``issue_id`` so a later event may process it again."""
        self._entries.pop(issue_id, None)

    def evict_older_than(self, duration: dt.timedelta) -> int:
        """Drop entries marked before ``now - duration``.

        Returns
        -------
        int
            Number of evicted entries.

        """
        cutoff = self._clock() - duration
        expired = [
            issue_id
            for issue_id, marked_at in self._entries.items()
            if marked_at < cutoff
        ]
        for issue_id in expired:
            del self._entries[issue_id]
        return len(expired)
