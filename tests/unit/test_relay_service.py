"""Unit tests for the relay service."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest

from niabridge.relay.config import RelayConfig
from niabridge.relay.models import decode_event
from niabridge.relay.reconciler import ReconcileOutcome, format_comment
from niabridge.relay.service import RelayService, RelayServiceDependencies
from tests.helpers.relay_fakes import (
    REPOSITORY,
    FakeAnalyser,
    FakeIssueTracker,
    issue_body,
)

if typ.TYPE_CHECKING:
    from niabridge.relay.tracker import IdempotencyTracker
    from tests.helpers.relay_fakes import FakeClock


class TestAccept:
    """Tests for synchronous acceptance."""

    def test_marks_qualifying_issue(
        self, relay_service: RelayService, tracker: IdempotencyTracker
    ) -> None:
        """A qualifying event is returned and marked before any await."""
        issue = relay_service.accept(decode_event(issue_body("X1")))

        assert issue is not None
        assert issue.id == "X1"
        assert "X1" in tracker

    def test_duplicate_is_rejected(self, relay_service: RelayService) -> None:
        """The second identical event is ignored while the first is tracked."""
        event = decode_event(issue_body("X1"))

        assert relay_service.accept(event) is not None
        assert relay_service.accept(event) is None

    def test_ignored_event_is_not_marked(
        self, relay_service: RelayService, tracker: IdempotencyTracker
    ) -> None:
        """Rejected events leave the tracker untouched."""
        assert relay_service.accept(decode_event(issue_body(labels=("bug",)))) is None
        assert len(tracker) == 0

    def test_accept_body_ignores_invalid_json(
        self, relay_service: RelayService
    ) -> None:
        """Undecodable bodies are ignored rather than raised."""
        assert relay_service.accept_body(b"{not json") is None


class TestProcess:
    """Tests for background processing of accepted issues."""

    @pytest.mark.asyncio
    async def test_comments_and_assigns(
        self,
        relay_service: RelayService,
        analyser: FakeAnalyser,
        issue_tracker: FakeIssueTracker,
        tracker: IdempotencyTracker,
    ) -> None:
        """An accepted issue is analysed, commented on and self-assigned."""
        outcome = await relay_service.handle(decode_event(issue_body("X1")))

        assert outcome is ReconcileOutcome.COMMENTED_AND_ASSIGNED
        assert analyser.queries == [
            ("Add retry to sync job", "Sync fails on flaky networks.")
        ]
        assert issue_tracker.comment_count("X1") == 1
        assert "X1" in tracker

    @pytest.mark.asyncio
    async def test_null_analysis_allows_retry(
        self, issue_tracker: FakeIssueTracker, tracker: IdempotencyTracker
    ) -> None:
        """After a null analysis the same event is accepted again."""
        service = RelayService(
            RelayServiceDependencies(
                analyser=FakeAnalyser([None]), issue_tracker=issue_tracker
            ),
            tracker=tracker,
        )
        event = decode_event(issue_body("X1"))

        assert await service.handle(event) is ReconcileOutcome.RELEASED_NO_ANALYSIS
        assert "X1" not in tracker
        assert service.accept(event) is not None

    @pytest.mark.asyncio
    async def test_existing_comment_skips_query(
        self,
        relay_service: RelayService,
        analyser: FakeAnalyser,
        issue_tracker: FakeIssueTracker,
        tracker: IdempotencyTracker,
    ) -> None:
        """An earlier analysis comment short-circuits the query."""
        await issue_tracker.create_comment("X1", format_comment("Old analysis"))

        outcome = await relay_service.handle(decode_event(issue_body("X1")))

        assert outcome is ReconcileOutcome.ALREADY_COMMENTED
        assert analyser.queries == []
        assert issue_tracker.comment_count("X1") == 1
        assert "X1" in tracker

    @pytest.mark.asyncio
    async def test_existing_comment_check_can_be_disabled(
        self, issue_tracker: FakeIssueTracker
    ) -> None:
        """With the pre-check off the issue is analysed regardless."""
        await issue_tracker.create_comment("X1", format_comment("Old analysis"))
        service = RelayService(
            RelayServiceDependencies(
                analyser=FakeAnalyser(), issue_tracker=issue_tracker
            ),
            config=RelayConfig(check_existing_comments=False),
        )

        outcome = await service.handle(decode_event(issue_body("X1")))

        assert outcome is ReconcileOutcome.COMMENTED_AND_ASSIGNED
        assert issue_tracker.comment_count("X1") == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_releases_issue(
        self, issue_tracker: FakeIssueTracker, tracker: IdempotencyTracker
    ) -> None:
        """Unexpected failures are contained and the id is released."""
        service = RelayService(
            RelayServiceDependencies(
                analyser=FakeAnalyser(error=RuntimeError("boom")),
                issue_tracker=issue_tracker,
            ),
            tracker=tracker,
        )

        outcome = await service.handle(decode_event(issue_body("X1")))

        assert outcome is ReconcileOutcome.RELEASED_JOB_FAILED
        assert "X1" not in tracker

    @pytest.mark.asyncio
    async def test_handle_returns_none_for_ignored_event(
        self, relay_service: RelayService
    ) -> None:
        """Ignored events are not processed."""
        event = decode_event(issue_body(event_type="Comment"))

        assert await relay_service.handle(event) is None


class TestMaintenance:
    """Tests for eviction, health and shutdown."""

    def test_evict_expired_uses_retention(
        self,
        relay_service: RelayService,
        tracker: IdempotencyTracker,
        fake_clock: FakeClock,
    ) -> None:
        """Entries older than the retention window are evicted."""
        tracker.mark("old")
        fake_clock.advance(dt.timedelta(hours=2))
        tracker.mark("fresh")

        assert relay_service.evict_expired() == 1
        assert "old" not in tracker
        assert "fresh" in tracker

    def test_health_reports_state(
        self,
        relay_service: RelayService,
        analyser: FakeAnalyser,
        tracker: IdempotencyTracker,
    ) -> None:
        """Health exposes repository, cache size and tracked count."""
        analyser.cache.put("Add retry", "Use a queue.")
        tracker.mark("X1")
        tracker.mark("X2")

        health = relay_service.health()

        assert health.repository == REPOSITORY
        assert health.cache_size == 1
        assert health.tracked_issues == 2

    @pytest.mark.asyncio
    async def test_aclose_closes_clients(
        self,
        relay_service: RelayService,
        analyser: FakeAnalyser,
        issue_tracker: FakeIssueTracker,
    ) -> None:
        """Shutdown closes both clients."""
        await relay_service.aclose()

        assert analyser.closed
        assert issue_tracker.closed
