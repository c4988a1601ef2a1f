"""Unit tests for relay structured logging."""

from __future__ import annotations

import pytest

from niabridge.relay.filter import FilterRejection
from niabridge.relay.models import EventAction, IncomingEvent
from niabridge.relay.observability import RelayEventLogger, RelayEventType
from niabridge.relay.reconciler import ReconcileOutcome
from niabridge.relay.service import RelayService
from tests.helpers.femtologging_capture import capture_femto_logs
from tests.helpers.relay_fakes import issue_body

_LOGGER = "niabridge.relay.observability"


def test_accepted_event_line() -> None:
    """Accepted events are logged with their id and title."""
    with capture_femto_logs(_LOGGER) as capture:
        RelayEventLogger().log_event_accepted(issue_id="X1", title="Add retry")
        capture.wait_for_count(1)

    record = capture.records[0]
    assert record.level == "INFO"
    assert record.message == "[relay.event.accepted] issue_id=X1 title='Add retry'"


def test_ignored_event_is_debug() -> None:
    """Ignored events are logged at DEBUG with the rejection reason."""
    event = IncomingEvent(type="Comment", action=EventAction.CREATE)

    with capture_femto_logs(_LOGGER) as capture:
        RelayEventLogger().log_event_ignored(event, FilterRejection.NOT_AN_ISSUE)
        capture.wait_for_count(1)

    record = capture.records[0]
    assert record.level == "DEBUG"
    assert record.message.startswith(f"[{RelayEventType.EVENT_IGNORED}]")
    assert "reason=not_an_issue" in record.message


def test_job_failure_attaches_exception() -> None:
    """Unexpected job failures are logged at ERROR with the exception."""
    error = RuntimeError("boom")

    with capture_femto_logs(_LOGGER) as capture:
        RelayEventLogger().log_job_failed(issue_id="X1", error=error)
        capture.wait_for_count(1)

    record = capture.records[0]
    assert record.level == "ERROR"
    assert "error_type=RuntimeError" in record.message


@pytest.mark.asyncio
async def test_successful_relay_logs_lifecycle(relay_service: RelayService) -> None:
    """A full relay emits accepted, posted and assigned events in order."""
    with capture_femto_logs(_LOGGER) as capture:
        issue = relay_service.accept_body(issue_body("X1"))
        assert issue is not None
        outcome = await relay_service.process(issue)
        capture.wait_for_count(3)

    assert outcome is ReconcileOutcome.COMMENTED_AND_ASSIGNED
    prefixes = [message.split("]")[0] + "]" for message in capture.messages()]
    assert prefixes == [
        "[relay.event.accepted]",
        "[relay.comment.posted]",
        "[relay.issue.assigned]",
    ]
