"""Unit tests for the femtologging helpers."""

from __future__ import annotations

import pytest

from niabridge.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


class _RecordingLogger:
    """Logger double storing ``(level, message, exc_info)`` tuples."""

    def __init__(self) -> None:
        self.entries: list[tuple[str, str, object | None]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        assert stack_info is False
        self.entries.append((level, message, exc_info))
        return message


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("debug", ("DEBUG", False)),
        ("  Warn ", ("WARN", False)),
        ("TRACE", ("TRACE", False)),
        ("verbose", ("INFO", True)),
        ("", ("INFO", True)),
        (None, ("INFO", True)),
    ],
)
def test_normalize_log_level(raw: str | None, expected: tuple[str, bool]) -> None:
    """Known levels are upper-cased; anything else falls back to INFO."""
    assert normalize_log_level(raw) == expected


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        (log_debug, "DEBUG"),
        (log_info, "INFO"),
        (log_warning, "WARNING"),
        (log_error, "ERROR"),
    ],
)
def test_helpers_format_before_emitting(
    helper: object, level: str
) -> None:
    """Each helper interpolates its arguments and emits at its level."""
    logger = _RecordingLogger()

    helper(logger, "issue %s took %.1fs", "X1", 1.5)  # type: ignore[operator]

    assert logger.entries == [(level, "issue X1 took 1.5s", None)]


def test_log_exception_uses_message_verbatim() -> None:
    """Messages containing ``%`` are not interpolated by ``log_exception``."""
    logger = _RecordingLogger()
    exc = RuntimeError("boom")

    log_exception(logger, "100% failed", exc)

    assert logger.entries == [("ERROR", "100% failed", exc)]


def test_configure_logging_passes_normalised_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """``configure_logging`` hands the normalised level to femtologging."""
    calls: list[dict[str, object]] = []
    monkeypatch.setattr(
        "niabridge.logging.basicConfig", lambda **kwargs: calls.append(kwargs)
    )

    assert configure_logging("nonsense", force=True) == ("INFO", True)
    assert calls == [{"level": "INFO", "force": True}]
