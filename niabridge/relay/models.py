"""Webhook payload structures and the decoded event passed to the filter."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

import msgspec

from niabridge.linear.models import IssueRef
from niabridge.relay.errors import InvalidPayloadError

ISSUE_EVENT_TYPE = "Issue"


class EventAction(enum.StrEnum):
    """Webhook actions the relay distinguishes."""

    CREATE = "create"
    UPDATE = "update"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str) -> EventAction:
        """Map a raw webhook ``action`` onto a known action or ``OTHER``."""
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER


class LabelPayload(msgspec.Struct, kw_only=True):
    """A label entry inside an issue webhook payload."""

    name: str


class IssueDataPayload(msgspec.Struct, kw_only=True, rename="camel"):
    """The ``data`` object of an ``Issue`` webhook."""

    id: str
    title: str
    description: str | None = None
    labels: list[LabelPayload] = msgspec.field(default_factory=list)
    assignee_id: str | None = None


class WebhookPayload(msgspec.Struct, kw_only=True, rename="camel"):
    """Top-level Linear webhook body.

    ``data`` is kept as a raw mapping because its shape depends on ``type``;
    it is converted to :class:`IssueDataPayload` only for issue events.
    """

    action: str = ""
    type: str = ""
    data: dict[str, typ.Any] | None = None
    updated_from: dict[str, typ.Any] | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class IncomingEvent:
    """A decoded webhook event.

    Attributes
    ----------
    type
        Entity type the event is about (``"Issue"``, ``"Comment"``, ...).
    action
        Normalised webhook action.
    issue
        Issue snapshot for well-formed issue events, else ``None``.
    changed_fields
        Names of the fields listed in ``updatedFrom``, for updates.

    """

    type: str
    action: EventAction
    issue: IssueRef | None = None
    changed_fields: frozenset[str] | None = None


def _issue_from_data(data: dict[str, typ.Any] | None) -> IssueRef | None:
    if not data:
        return None
    try:
        issue = msgspec.convert(data, type=IssueDataPayload)
    except msgspec.ValidationError:
        return None
    return IssueRef(
        id=issue.id,
        title=issue.title,
        description=issue.description,
        labels=frozenset(label.name for label in issue.labels),
        assignee_id=issue.assignee_id,
    )


def to_incoming_event(payload: WebhookPayload) -> IncomingEvent:
    """Convert a decoded webhook payload into an :class:`IncomingEvent`."""
    issue = _issue_from_data(payload.data) if payload.type == ISSUE_EVENT_TYPE else None
    changed_fields = (
        frozenset(payload.updated_from) if payload.updated_from is not None else None
    )
    return IncomingEvent(
        type=payload.type,
        action=EventAction.from_raw(payload.action),
        issue=issue,
        changed_fields=changed_fields,
    )


def decode_event(body: bytes | str) -> IncomingEvent:
    """Decode a raw webhook body.

    Raises
    ------
    InvalidPayloadError
        If the body is not a JSON object matching the webhook envelope.

    """
    try:
        payload = msgspec.json.decode(body, type=WebhookPayload)
    except msgspec.DecodeError as exc:
        raise InvalidPayloadError.undecodable(str(exc)) from exc
    return to_incoming_event(payload)
