"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from niabridge.relay.config import RelayConfig
from niabridge.relay.service import RelayService, RelayServiceDependencies
from niabridge.relay.tracker import IdempotencyTracker
from tests.helpers.relay_fakes import FakeAnalyser, FakeClock, FakeIssueTracker


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def tracker(fake_clock: FakeClock) -> IdempotencyTracker:
    """Provide an empty tracker driven by the fake clock."""
    return IdempotencyTracker(clock=fake_clock)


@pytest.fixture
def issue_tracker() -> FakeIssueTracker:
    """Provide a fake Linear client."""
    return FakeIssueTracker()


@pytest.fixture
def analyser() -> FakeAnalyser:
    """Provide a fake Nia client answering with a fixed analysis."""
    return FakeAnalyser(["Use a queue."])


@pytest.fixture
def relay_service(
    analyser: FakeAnalyser,
    issue_tracker: FakeIssueTracker,
    tracker: IdempotencyTracker,
) -> RelayService:
    """Provide a relay service wired to the fakes."""
    return RelayService(
        RelayServiceDependencies(analyser=analyser, issue_tracker=issue_tracker),
        config=RelayConfig(target_label="nia"),
        tracker=tracker,
    )
