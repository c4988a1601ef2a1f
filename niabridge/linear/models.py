"""Typed snapshots of Linear entities read by the bridge."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class IssueRef:
    """Read-only snapshot of a Linear issue.

    Attributes
    ----------
    id
        Opaque Linear issue identifier.
    title
        Issue title.
    description
        Markdown description, when present.
    labels
        Label names attached to the issue.
    assignee_id
        Identifier of the current assignee, when assigned.

    """

    id: str
    title: str
    description: str | None = None
    labels: frozenset[str] = frozenset()
    assignee_id: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class Viewer:
    """The user the API key authenticates as."""

    id: str
    name: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class IssueComment:
    """A comment on a Linear issue."""

    id: str
    body: str
