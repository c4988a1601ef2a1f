"""Application factory for the niabridge Falcon ASGI application.

This module provides ``create_app()`` which builds and configures the
Falcon ASGI application with health endpoints and, when a relay service is
available, the Linear webhook endpoint.

Usage
-----
Create a health-only app::

    app = create_app()

Create a full app with the webhook endpoint::

    from niabridge.api.app import AppDependencies, create_app

    deps = AppDependencies(relay=service, webhook_secret=secret)
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from niabridge.api.errors import WebhookSignatureError, handle_webhook_signature
from niabridge.api.health.resources import HealthResource, ReadyResource

if typ.TYPE_CHECKING:
    from niabridge.relay.service import RelayService

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    relay
        Relay service handling webhook events. When ``None`` only health
        endpoints are registered.
    webhook_secret
        Linear signing secret used to verify deliveries, if configured.
    manage_lifespan
        Register the lifespan middleware that runs tracker eviction and
        closes clients on shutdown.

    """

    relay: RelayService | None = None
    webhook_secret: str | None = None
    manage_lifespan: bool = True


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    When *dependencies* provides a relay service, the app includes
    ``POST /webhook`` and a lifespan middleware for tracker eviction.
    Otherwise only ``/health`` and ``/ready`` are registered.

    Parameters
    ----------
    dependencies
        Optional application dependencies.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    relay = dependencies.relay if dependencies is not None else None
    middleware: list[object] = []

    if relay is not None and dependencies is not None and dependencies.manage_lifespan:
        from niabridge.api.lifespan import RelayLifespan

        middleware.append(RelayLifespan(relay))

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource(relay=relay))
    app.add_route("/ready", ReadyResource())

    if relay is not None and dependencies is not None:
        from niabridge.api.webhook.resources import WebhookResource

        app.add_route(
            "/webhook",
            WebhookResource(relay, webhook_secret=dependencies.webhook_secret),
        )

    app.add_error_handler(WebhookSignatureError, handle_webhook_signature)

    return app
