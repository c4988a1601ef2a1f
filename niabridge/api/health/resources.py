"""Health probe resources for liveness and readiness checks.

``HealthResource`` reports relay state (target repository, cache size and
tracked issue count) when a relay service is attached, and a bare
``{"status": "ok"}`` otherwise. ``ReadyResource`` is stateless.

Usage
-----
Register health endpoints on the Falcon app::

    from niabridge.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource(relay=service))
    app.add_route("/ready", ReadyResource())

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from niabridge.relay.service import RelayService

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource.

    Always responds with HTTP 200. When a relay is attached the body also
    carries ``repository``, ``cache_size`` and ``tracked_issues``.

    Parameters
    ----------
    relay
        Relay service whose state is reported, if any.

    """

    def __init__(self, relay: RelayService | None = None) -> None:
        """Configure the resource with an optional relay service."""
        self._relay = relay

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with liveness status.

        """
        media: dict[str, typ.Any] = {"status": "ok"}
        if self._relay is not None:
            health = self._relay.health()
            media.update(
                repository=health.repository,
                cache_size=health.cache_size,
                tracked_issues=health.tracked_issues,
            )
        resp.media = media
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource returning ``{"status": "ready"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = {"status": "ready"}
        resp.status = HTTPStatus.OK
