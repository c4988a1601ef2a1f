"""Configuration for the relay service."""

from __future__ import annotations

import dataclasses
import datetime as dt
import os

from niabridge.relay.errors import RelayConfigError

_DEFAULT_TARGET_LABEL = "nia"
_DEFAULT_RETENTION = dt.timedelta(hours=1)
_DEFAULT_EVICTION_INTERVAL = dt.timedelta(minutes=10)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _parse_seconds(variable: str, default: dt.timedelta) -> dt.timedelta:
    raw = os.environ.get(variable)
    if raw is None:
        return default
    try:
        seconds = float(raw)
    except ValueError as exc:
        raise RelayConfigError.invalid_parameter(
            variable, raw, "Must be a positive number of seconds"
        ) from exc
    if seconds <= 0:
        raise RelayConfigError.invalid_parameter(
            variable, raw, "Must be a positive number of seconds"
        )
    return dt.timedelta(seconds=seconds)


def _parse_flag(variable: str, *, default: bool) -> bool:
    raw = os.environ.get(variable)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise RelayConfigError.invalid_parameter(
        variable, raw, "Must be one of true/false/1/0/yes/no/on/off"
    )


@dataclasses.dataclass(frozen=True, slots=True)
class RelayConfig:
    """Tunables for filtering and idempotency tracking.

    Attributes
    ----------
    target_label
        Label that opts an issue into analysis.
    retention
        How long an accepted issue stays tracked before eviction.
    eviction_interval
        Delay between eviction passes.
    check_existing_comments
        Look for an earlier analysis comment before querying, which protects
        against duplicates after a restart cleared the tracker.

    """

    target_label: str = _DEFAULT_TARGET_LABEL
    retention: dt.timedelta = _DEFAULT_RETENTION
    eviction_interval: dt.timedelta = _DEFAULT_EVICTION_INTERVAL
    check_existing_comments: bool = True

    @classmethod
    def from_env(cls) -> RelayConfig:
        """Build configuration from environment variables.

        Reads ``NIA_LABEL``, ``NIABRIDGE_RETENTION_S``,
        ``NIABRIDGE_EVICTION_INTERVAL_S`` and
        ``NIABRIDGE_CHECK_EXISTING_COMMENTS``; all are optional.

        Raises
        ------
        RelayConfigError
            If a value is present but invalid.

        """
        label = os.environ.get("NIA_LABEL", _DEFAULT_TARGET_LABEL).strip()
        if not label:
            raise RelayConfigError.missing("NIA_LABEL")
        return cls(
            target_label=label,
            retention=_parse_seconds("NIABRIDGE_RETENTION_S", _DEFAULT_RETENTION),
            eviction_interval=_parse_seconds(
                "NIABRIDGE_EVICTION_INTERVAL_S", _DEFAULT_EVICTION_INTERVAL
            ),
            check_existing_comments=_parse_flag(
                "NIABRIDGE_CHECK_EXISTING_COMMENTS", default=True
            ),
        )
