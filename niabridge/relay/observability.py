"""Structured log events for the relay lifecycle.

Every event is a single line of the form ``[relay.<name>] key=value ...`` so
log aggregators can filter on the bracketed event type.

Usage
-----
>>> event_logger = RelayEventLogger()
>>> event_logger.log_event_accepted(issue_id="X1", title="Add retry")

"""

from __future__ import annotations

import enum
import typing as typ

from niabridge.logging import get_logger, log_debug, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from niabridge.relay.filter import FilterRejection
    from niabridge.relay.models import IncomingEvent

logger = get_logger(__name__)


class RelayEventType(enum.StrEnum):
    """Structured log event types for the relay."""

    EVENT_IGNORED = "relay.event.ignored"
    EVENT_ACCEPTED = "relay.event.accepted"
    PAYLOAD_INVALID = "relay.payload.invalid"
    ANALYSIS_UNAVAILABLE = "relay.analysis.unavailable"
    ALREADY_COMMENTED = "relay.issue.already_commented"
    COMMENT_LOOKUP_FAILED = "relay.comment.lookup_failed"
    COMMENT_POSTED = "relay.comment.posted"
    COMMENT_FAILED = "relay.comment.failed"
    ISSUE_ASSIGNED = "relay.issue.assigned"
    ASSIGNMENT_FAILED = "relay.assignment.failed"
    ISSUE_RELEASED = "relay.issue.released"
    JOB_FAILED = "relay.job.failed"
    TRACKER_EVICTED = "relay.tracker.evicted"


class RelayEventLogger:
    """Emit relay events via femtologging.

    Ignored events are logged at DEBUG, progress at INFO, recoverable
    failures at WARNING and failures that lose work at ERROR.
    """

    def log_event_ignored(
        self, event: IncomingEvent, reason: FilterRejection
    ) -> None:
        """Log a webhook event the filter rejected."""
        log_debug(
            logger,
            "[%s] type=%s action=%s issue_id=%s reason=%s",
            RelayEventType.EVENT_IGNORED,
            event.type,
            event.action,
            event.issue.id if event.issue is not None else None,
            reason,
        )

    def log_payload_invalid(self, error: Exception) -> None:
        """Log a webhook body that could not be decoded."""
        log_warning(
            logger,
            "[%s] error=%s",
            RelayEventType.PAYLOAD_INVALID,
            error,
        )

    def log_event_accepted(self, *, issue_id: str, title: str) -> None:
        """Log an issue accepted for analysis."""
        log_info(
            logger,
            "[%s] issue_id=%s title=%r",
            RelayEventType.EVENT_ACCEPTED,
            issue_id,
            title,
        )

    def log_already_commented(self, *, issue_id: str) -> None:
        """Log an issue skipped because an earlier analysis comment exists."""
        log_info(
            logger,
            "[%s] issue_id=%s",
            RelayEventType.ALREADY_COMMENTED,
            issue_id,
        )

    def log_comment_lookup_failed(
        self, *, issue_id: str, error: BaseException
    ) -> None:
        """Log a failed lookup of existing comments; analysis proceeds."""
        log_warning(
            logger,
            "[%s] issue_id=%s error_type=%s error_message=%s",
            RelayEventType.COMMENT_LOOKUP_FAILED,
            issue_id,
            type(error).__name__,
            error,
        )

    def log_analysis_unavailable(self, *, issue_id: str) -> None:
        """Log that no analysis was produced for an issue."""
        log_warning(
            logger,
            "[%s] issue_id=%s hint=check_repository_indexing",
            RelayEventType.ANALYSIS_UNAVAILABLE,
            issue_id,
        )

    def log_comment_posted(self, *, issue_id: str, comment_id: str) -> None:
        """Log a successfully posted analysis comment."""
        log_info(
            logger,
            "[%s] issue_id=%s comment_id=%s",
            RelayEventType.COMMENT_POSTED,
            issue_id,
            comment_id,
        )

    def log_comment_failed(self, *, issue_id: str, error: BaseException) -> None:
        """Log a comment submission failure."""
        log_error(
            logger,
            "[%s] issue_id=%s error_type=%s error_message=%s",
            RelayEventType.COMMENT_FAILED,
            issue_id,
            type(error).__name__,
            error,
        )

    def log_issue_assigned(self, *, issue_id: str, assignee_id: str) -> None:
        """Log that the issue was assigned to the bridge's own user."""
        log_info(
            logger,
            "[%s] issue_id=%s assignee_id=%s",
            RelayEventType.ISSUE_ASSIGNED,
            issue_id,
            assignee_id,
        )

    def log_assignment_failed(self, *, issue_id: str, error: BaseException) -> None:
        """Log an assignment failure; the comment stays in place."""
        log_warning(
            logger,
            "[%s] issue_id=%s error_type=%s error_message=%s",
            RelayEventType.ASSIGNMENT_FAILED,
            issue_id,
            type(error).__name__,
            error,
        )

    def log_issue_released(self, *, issue_id: str, reason: str) -> None:
        """Log that an issue was released for a later retry."""
        log_info(
            logger,
            "[%s] issue_id=%s reason=%s",
            RelayEventType.ISSUE_RELEASED,
            issue_id,
            reason,
        )

    def log_job_failed(self, *, issue_id: str, error: BaseException) -> None:
        """Log an unexpected failure while relaying an issue."""
        log_error(
            logger,
            "[%s] issue_id=%s error_type=%s error_message=%s",
            RelayEventType.JOB_FAILED,
            issue_id,
            type(error).__name__,
            error,
            exc_info=error,
        )

    def log_tracker_evicted(self, *, evicted: int, remaining: int) -> None:
        """Log an eviction pass that removed at least one entry."""
        log_info(
            logger,
            "[%s] evicted=%d remaining=%d",
            RelayEventType.TRACKER_EVICTED,
            evicted,
            remaining,
        )
