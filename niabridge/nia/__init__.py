"""Nia query client used to analyse issues against a repository.

Public API
----------
NiaQueryClient
    Async client with answer caching and a one-shot simplified retry.
NiaQueryConfig
    Configuration dataclass for the client.
QueryCache
    Unbounded cache of answers keyed by normalised issue title.
NiaQueryError
    Base exception for Nia errors (never raised out of ``query``).
NiaAPIError, NiaResponseShapeError, NiaConfigError
    Specific error types.
"""

from __future__ import annotations

from niabridge.nia.cache import QueryCache, normalise_query_key
from niabridge.nia.client import NiaQueryClient, extract_answer
from niabridge.nia.config import NiaQueryConfig
from niabridge.nia.errors import (
    NiaAPIError,
    NiaConfigError,
    NiaQueryError,
    NiaResponseShapeError,
)

__all__ = [
    "NiaAPIError",
    "NiaConfigError",
    "NiaQueryClient",
    "NiaQueryConfig",
    "NiaQueryError",
    "NiaResponseShapeError",
    "QueryCache",
    "extract_answer",
    "normalise_query_key",
]
