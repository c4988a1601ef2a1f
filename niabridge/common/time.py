"""Common time utilities."""

from __future__ import annotations

import datetime as dt
import typing as typ

Clock = typ.Callable[[], dt.datetime]


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)
