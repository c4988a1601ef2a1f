"""Turn an analysis result into a Linear comment or a tracker release."""

from __future__ import annotations

import enum
import typing as typ

from niabridge.linear.errors import LinearError
from niabridge.relay.observability import RelayEventLogger

if typ.TYPE_CHECKING:
    from niabridge.linear.client import IssueTracker
    from niabridge.relay.tracker import IdempotencyTracker

COMMENT_HEADER = "### 🤖 Nia Architectural Review"

# The footer doubles as the marker used to recognise earlier analysis
# comments, so it must stay stable across releases.
COMMENT_MARKER = "*Verified via Nia-Linear Bridge*"


def format_comment(analysis: str) -> str:
    """Wrap ``analysis`` in the fixed comment header and footer."""
    return f"{COMMENT_HEADER}\n\n{analysis.strip()}\n\n---\n{COMMENT_MARKER}"


class ReconcileOutcome(enum.StrEnum):
    """What reconciliation did for one issue."""

    COMMENTED = "commented"
    COMMENTED_AND_ASSIGNED = "commented_and_assigned"
    ASSIGNMENT_FAILED = "assignment_failed"
    RELEASED_NO_ANALYSIS = "released_no_analysis"
    RELEASED_COMMENT_FAILED = "released_comment_failed"
    ALREADY_COMMENTED = "already_commented"
    RELEASED_JOB_FAILED = "released_job_failed"


class OutcomeReconciler:
    """Post analysis comments and keep the tracker consistent with delivery.

    A comment that reaches Linear is the success signal: the tracker entry is
    kept and nothing that happens afterwards (such as a failed assignment)
    rolls it back. Anything that prevents the comment from being posted
    releases the entry so a later webhook can retry.

    Parameters
    ----------
    tracker
        Idempotency tracker shared with the event filter.
    issue_tracker
        Linear client used for comments, assignment and identity lookups.
    event_logger
        Structured event logger.

    """

    def __init__(
        self,
        tracker: IdempotencyTracker,
        issue_tracker: IssueTracker,
        *,
        event_logger: RelayEventLogger | None = None,
    ) -> None:
        """Configure the reconciler with its collaborators."""
        self._tracker = tracker
        self._issue_tracker = issue_tracker
        self._events = event_logger or RelayEventLogger()
        self._viewer_id: str | None = None

    async def reconcile(
        self,
        issue_id: str,
        analysis: str | None,
        current_assignee_id: str | None,
    ) -> ReconcileOutcome:
        """Deliver ``analysis`` for ``issue_id`` or release it for retry.

        Parameters
        ----------
        issue_id
            Linear issue identifier.
        analysis
            Analysis text, or ``None`` when the query produced nothing.
        current_assignee_id
            Assignee at the time of the event; the issue is only assigned to
            the bridge's user when this is empty.

        Returns
        -------
        ReconcileOutcome
            The action taken.

        """
        if analysis is None:
            self._events.log_analysis_unavailable(issue_id=issue_id)
            self._release(issue_id, ReconcileOutcome.RELEASED_NO_ANALYSIS)
            return ReconcileOutcome.RELEASED_NO_ANALYSIS

        try:
            comment_id = await self._issue_tracker.create_comment(
                issue_id, format_comment(analysis)
            )
        except LinearError as exc:
            self._events.log_comment_failed(issue_id=issue_id, error=exc)
            self._release(issue_id, ReconcileOutcome.RELEASED_COMMENT_FAILED)
            return ReconcileOutcome.RELEASED_COMMENT_FAILED

        self._events.log_comment_posted(issue_id=issue_id, comment_id=comment_id)

        if current_assignee_id:
            return ReconcileOutcome.COMMENTED

        try:
            viewer_id = await self._resolve_viewer_id()
            await self._issue_tracker.assign_issue(issue_id, viewer_id)
        except LinearError as exc:
            self._events.log_assignment_failed(issue_id=issue_id, error=exc)
            return ReconcileOutcome.ASSIGNMENT_FAILED

        self._events.log_issue_assigned(issue_id=issue_id, assignee_id=viewer_id)
        return ReconcileOutcome.COMMENTED_AND_ASSIGNED

    async def has_already_commented(self, issue_id: str) -> bool:
        """Return True when an earlier analysis comment exists on the issue.

        A failed lookup is treated as "not commented" so the issue is still
        analysed.
        """
        try:
            comments = await self._issue_tracker.list_comments(issue_id)
        except LinearError as exc:
            self._events.log_comment_lookup_failed(issue_id=issue_id, error=exc)
            return False
        return any(COMMENT_MARKER in comment.body for comment in comments)

    async def _resolve_viewer_id(self) -> str:
        if self._viewer_id is None:
            viewer = await self._issue_tracker.get_viewer()
            self._viewer_id = viewer.id
        return self._viewer_id

    def _release(self, issue_id: str, reason: ReconcileOutcome) -> None:
        self._tracker.release(issue_id)
        self._events.log_issue_released(issue_id=issue_id, reason=reason)
