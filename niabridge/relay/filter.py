"""Decide which webhook events should trigger an analysis.

An event qualifies when it creates or updates an issue carrying the target
label, the issue is not already tracked, and the update is not the echo of
the relay's own auto-assignment.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from niabridge.relay.models import ISSUE_EVENT_TYPE, EventAction

if typ.TYPE_CHECKING:
    from niabridge.relay.models import IncomingEvent
    from niabridge.relay.tracker import IdempotencyTracker

_HANDLED_ACTIONS = frozenset({EventAction.CREATE, EventAction.UPDATE})

# Fields the relay itself writes back to an issue. An update touching only
# these is the echo of our own reconciliation.
_SELF_WRITTEN_FIELDS = frozenset({"assigneeId"})

# Linear adds this to every ``updatedFrom`` payload.
_BOOKKEEPING_FIELDS = frozenset({"updatedAt"})


class FilterRejection(enum.StrEnum):
    """Why an event was not processed."""

    NOT_AN_ISSUE = "not_an_issue"
    UNSUPPORTED_ACTION = "unsupported_action"
    MISSING_ISSUE = "missing_issue"
    MISSING_LABEL = "missing_label"
    ALREADY_TRACKED = "already_tracked"
    ASSIGNEE_ONLY_UPDATE = "assignee_only_update"


def _normalise_label(label: str) -> str:
    return label.lower()


def _is_self_written_update(event: IncomingEvent) -> bool:
    if event.action is not EventAction.UPDATE or event.changed_fields is None:
        return False
    changed = event.changed_fields - _BOOKKEEPING_FIELDS
    return bool(changed) and changed <= _SELF_WRITTEN_FIELDS


@dataclasses.dataclass(frozen=True, slots=True)
class EventFilter:
    """Predicate over an event and the current tracker state.

    Attributes
    ----------
    target_label
        Label that opts an issue into analysis (matched case-insensitively).
    tracker
        Tracker consulted for in-flight and handled issue ids.

    """

    target_label: str
    tracker: IdempotencyTracker

    def should_process(self, event: IncomingEvent) -> bool:
        """Return True when ``event`` should trigger an analysis."""
        return self.rejection_reason(event) is None

    def rejection_reason(self, event: IncomingEvent) -> FilterRejection | None:
        """Return why ``event`` is rejected, or ``None`` when it qualifies."""
        if event.type != ISSUE_EVENT_TYPE:
            return FilterRejection.NOT_AN_ISSUE
        if event.action not in _HANDLED_ACTIONS:
            return FilterRejection.UNSUPPORTED_ACTION
        issue = event.issue
        if issue is None:
            return FilterRejection.MISSING_ISSUE
        if not self._has_target_label(issue.labels):
            return FilterRejection.MISSING_LABEL
        if self.tracker.has(issue.id):
            return FilterRejection.ALREADY_TRACKED
        if _is_self_written_update(event):
            return FilterRejection.ASSIGNEE_ONLY_UPDATE
        return None

    def _has_target_label(self, labels: typ.Iterable[str]) -> bool:
        wanted = _normalise_label(self.target_label)
        return any(_normalise_label(label) == wanted for label in labels)
