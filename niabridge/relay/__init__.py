"""Event-to-comment relay with in-memory idempotency tracking.

Public API
----------
RelayService
    Owns the tracker, filter and reconciler; entry point for webhooks.
RelayServiceDependencies
    External collaborators (analysis client, issue tracker).
RelayConfig
    Target label, retention window and eviction interval.
IdempotencyTracker
    In-memory issue id → first-acceptance timestamp map.
EventFilter, FilterRejection
    Qualification predicate and its rejection reasons.
OutcomeReconciler, ReconcileOutcome
    Comment/assign or release after an analysis.
TrackerEvictionLoop
    Background task that evicts expired tracker entries.
"""

from __future__ import annotations

from niabridge.relay.config import RelayConfig
from niabridge.relay.errors import InvalidPayloadError, RelayConfigError
from niabridge.relay.eviction import TrackerEvictionLoop
from niabridge.relay.filter import EventFilter, FilterRejection
from niabridge.relay.models import (
    EventAction,
    IncomingEvent,
    WebhookPayload,
    decode_event,
    to_incoming_event,
)
from niabridge.relay.observability import RelayEventLogger, RelayEventType
from niabridge.relay.reconciler import (
    COMMENT_MARKER,
    OutcomeReconciler,
    ReconcileOutcome,
    format_comment,
)
from niabridge.relay.service import (
    IssueAnalyser,
    RelayHealth,
    RelayService,
    RelayServiceDependencies,
)
from niabridge.relay.tracker import IdempotencyTracker

__all__ = [
    "COMMENT_MARKER",
    "EventAction",
    "EventFilter",
    "FilterRejection",
    "IdempotencyTracker",
    "IncomingEvent",
    "InvalidPayloadError",
    "IssueAnalyser",
    "OutcomeReconciler",
    "ReconcileOutcome",
    "RelayConfig",
    "RelayConfigError",
    "RelayEventLogger",
    "RelayEventType",
    "RelayHealth",
    "RelayService",
    "RelayServiceDependencies",
    "TrackerEvictionLoop",
    "WebhookPayload",
    "decode_event",
    "format_comment",
    "to_incoming_event",
]
