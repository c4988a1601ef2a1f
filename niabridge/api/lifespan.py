"""ASGI lifespan middleware that owns the relay's background work.

On startup the tracker eviction loop is started on the server's event loop;
on shutdown it is cancelled and the relay's HTTP clients are closed.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(middleware=[RelayLifespan(service)])

"""

from __future__ import annotations

import typing as typ

from niabridge.logging import get_logger, log_info
from niabridge.relay.eviction import TrackerEvictionLoop

if typ.TYPE_CHECKING:
    from niabridge.relay.service import RelayService

__all__ = ["RelayLifespan"]

logger = get_logger(__name__)


class RelayLifespan:
    """Falcon middleware hooking relay start-up and shutdown to lifespan.

    Parameters
    ----------
    relay
        Relay service whose tracker is swept and whose clients are closed.
    eviction_loop
        Loop to run; built from the relay configuration when omitted.

    """

    def __init__(
        self,
        relay: RelayService,
        *,
        eviction_loop: TrackerEvictionLoop | None = None,
    ) -> None:
        """Configure the middleware with a relay and eviction loop."""
        self._relay = relay
        self._eviction = eviction_loop or TrackerEvictionLoop(relay)

    @property
    def eviction_loop(self) -> TrackerEvictionLoop:
        """Return the managed eviction loop."""
        return self._eviction

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Start the eviction loop."""
        self._eviction.start()
        log_info(
            logger,
            "Relay started (label=%s, retention=%ss, eviction_interval=%ss)",
            self._relay.config.target_label,
            self._relay.config.retention.total_seconds(),
            self._relay.config.eviction_interval.total_seconds(),
        )

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Stop the eviction loop and close relay clients."""
        await self._eviction.stop()
        await self._relay.aclose()
        log_info(logger, "Relay stopped")
