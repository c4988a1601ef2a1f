"""Linear issue-tracker client and typed snapshots."""

from __future__ import annotations

from .client import IssueTracker, LinearGraphQLClient, LinearGraphQLConfig
from .errors import (
    LinearAPIError,
    LinearConfigError,
    LinearError,
    LinearResponseShapeError,
)
from .models import IssueComment, IssueRef, Viewer

__all__ = [
    "IssueComment",
    "IssueRef",
    "IssueTracker",
    "LinearAPIError",
    "LinearConfigError",
    "LinearError",
    "LinearGraphQLClient",
    "LinearGraphQLConfig",
    "LinearResponseShapeError",
    "Viewer",
]
