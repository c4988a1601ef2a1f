"""Periodic eviction of expired idempotency records."""

from __future__ import annotations

import asyncio
import contextlib
import typing as typ

from niabridge.logging import get_logger, log_exception

if typ.TYPE_CHECKING:
    import datetime as dt

    from niabridge.relay.service import RelayService

logger = get_logger(__name__)


class TrackerEvictionLoop:
    """Run ``RelayService.evict_expired`` on a fixed interval.

    The loop is an independent asyncio task; each pass is synchronous and
    short, so it never holds up webhook handling.

    Parameters
    ----------
    service
        Relay whose tracker is swept.
    interval
        Delay between passes. Defaults to the relay's configured interval.

    """

    def __init__(
        self,
        service: RelayService,
        *,
        interval: dt.timedelta | None = None,
    ) -> None:
        """Configure the loop without starting it."""
        self._service = service
        interval = interval or service.config.eviction_interval
        self._interval_s = interval.total_seconds()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        """Return True while the background task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background task on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="niabridge-tracker-eviction"
        )

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_s)
            try:
                self._service.evict_expired()
            except Exception as exc:  # noqa: BLE001 - keep the loop alive
                log_exception(logger, "Tracker eviction pass failed", exc)
