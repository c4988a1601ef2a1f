"""Relay service tying the filter, query client and reconciler together.

``RelayService`` is constructed once at startup and owns the relay's mutable
state (idempotency tracker and, through the query client, the answer cache).
The ingress endpoint calls :meth:`RelayService.accept` synchronously before
acknowledging a webhook and schedules :meth:`RelayService.process` to run
after the response is sent.

Usage
-----
>>> service = RelayService(
...     RelayServiceDependencies(analyser=nia_client, issue_tracker=linear),
...     config=RelayConfig(target_label="nia"),
... )
>>> issue = service.accept(event)
>>> if issue is not None:
...     outcome = await service.process(issue)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from niabridge.relay.config import RelayConfig
from niabridge.relay.errors import InvalidPayloadError
from niabridge.relay.filter import EventFilter
from niabridge.relay.models import decode_event
from niabridge.relay.observability import RelayEventLogger
from niabridge.relay.reconciler import OutcomeReconciler, ReconcileOutcome
from niabridge.relay.tracker import IdempotencyTracker

if typ.TYPE_CHECKING:
    from niabridge.linear.client import IssueTracker
    from niabridge.linear.models import IssueRef
    from niabridge.nia.cache import QueryCache
    from niabridge.nia.config import NiaQueryConfig
    from niabridge.relay.models import IncomingEvent

__all__ = [
    "IssueAnalyser",
    "RelayHealth",
    "RelayService",
    "RelayServiceDependencies",
]


class IssueAnalyser(typ.Protocol):
    """What the relay needs from the analysis client."""

    @property
    def config(self) -> NiaQueryConfig:
        """Return the client configuration."""
        ...

    @property
    def cache(self) -> QueryCache | None:
        """Return the answer cache, when one is configured."""
        ...

    async def query(self, title: str, description: str | None = None) -> str | None:
        """Return analysis text for an issue, or ``None``."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


@dc.dataclass(frozen=True, slots=True)
class RelayServiceDependencies:
    """External collaborators of the relay.

    Attributes
    ----------
    analyser
        Client that produces the analysis for an issue.
    issue_tracker
        Client for the issue tracker the analysis is written back to.

    """

    analyser: IssueAnalyser
    issue_tracker: IssueTracker


@dc.dataclass(frozen=True, slots=True)
class RelayHealth:
    """Snapshot reported by the health endpoint."""

    repository: str
    cache_size: int
    tracked_issues: int


class RelayService:
    """Filter webhook events and relay qualifying issues to the analyser."""

    def __init__(
        self,
        dependencies: RelayServiceDependencies,
        *,
        config: RelayConfig | None = None,
        tracker: IdempotencyTracker | None = None,
        event_logger: RelayEventLogger | None = None,
    ) -> None:
        """Build the relay components around a single tracker."""
        self._config = config or RelayConfig()
        self._analyser = dependencies.analyser
        self._issue_tracker = dependencies.issue_tracker
        self._tracker = tracker or IdempotencyTracker()
        self._events = event_logger or RelayEventLogger()
        self._filter = EventFilter(
            target_label=self._config.target_label,
            tracker=self._tracker,
        )
        self._reconciler = OutcomeReconciler(
            self._tracker,
            self._issue_tracker,
            event_logger=self._events,
        )

    @property
    def config(self) -> RelayConfig:
        """Return the relay configuration."""
        return self._config

    @property
    def tracker(self) -> IdempotencyTracker:
        """Return the idempotency tracker owned by this service."""
        return self._tracker

    @property
    def issue_tracker(self) -> IssueTracker:
        """Return the issue tracker client comments are written to."""
        return self._issue_tracker

    @property
    def event_filter(self) -> EventFilter:
        """Return the event filter bound to this service's tracker."""
        return self._filter

    @property
    def reconciler(self) -> OutcomeReconciler:
        """Return the outcome reconciler bound to this service's tracker."""
        return self._reconciler

    def accept(self, event: IncomingEvent) -> IssueRef | None:
        """Filter ``event`` and, when it qualifies, mark its issue in flight.

        Marking happens before this method returns and without awaiting, so
        a duplicate event handled next is rejected by the filter.

        Returns
        -------
        IssueRef | None
            The issue to process, or ``None`` when the event was ignored.

        """
        reason = self._filter.rejection_reason(event)
        if reason is not None:
            self._events.log_event_ignored(event, reason)
            return None

        # The filter rejects events without an issue snapshot.
        issue = typ.cast("IssueRef", event.issue)
        self._tracker.mark(issue.id)
        self._events.log_event_accepted(issue_id=issue.id, title=issue.title)
        return issue

    def accept_body(self, body: bytes | str) -> IssueRef | None:
        """Decode a raw webhook body and :meth:`accept` it.

        Undecodable bodies are logged and ignored.
        """
        try:
            event = decode_event(body)
        except InvalidPayloadError as exc:
            self._events.log_payload_invalid(exc)
            return None
        return self.accept(event)

    async def process(self, issue: IssueRef) -> ReconcileOutcome:
        """Analyse an accepted issue and reconcile the outcome.

        Never raises: unexpected failures are logged and the issue is
        released so a later event can retry.
        """
        try:
            if self._config.check_existing_comments and (
                await self._reconciler.has_already_commented(issue.id)
            ):
                self._tracker.mark(issue.id)
                self._events.log_already_commented(issue_id=issue.id)
                return ReconcileOutcome.ALREADY_COMMENTED

            analysis = await self._analyser.query(issue.title, issue.description)
            return await self._reconciler.reconcile(
                issue.id, analysis, issue.assignee_id
            )
        except Exception as exc:  # noqa: BLE001 - background job boundary
            self._events.log_job_failed(issue_id=issue.id, error=exc)
            self._tracker.release(issue.id)
            return ReconcileOutcome.RELEASED_JOB_FAILED

    async def handle(self, event: IncomingEvent) -> ReconcileOutcome | None:
        """Accept and process ``event`` inline; ``None`` when ignored."""
        issue = self.accept(event)
        if issue is None:
            return None
        return await self.process(issue)

    def evict_expired(self) -> int:
        """Drop tracker entries older than the retention window."""
        evicted = self._tracker.evict_older_than(self._config.retention)
        if evicted:
            self._events.log_tracker_evicted(
                evicted=evicted, remaining=len(self._tracker)
            )
        return evicted

    def health(self) -> RelayHealth:
        """Return repository, cache size and tracked issue count."""
        cache = self._analyser.cache
        return RelayHealth(
            repository=self._analyser.config.repository,
            cache_size=len(cache) if cache is not None else 0,
            tracked_issues=len(self._tracker),
        )

    async def aclose(self) -> None:
        """Close the analyser and issue tracker clients."""
        await self._analyser.aclose()
        aclose = getattr(self._issue_tracker, "aclose", None)
        if aclose is not None:
            await aclose()
