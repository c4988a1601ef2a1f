"""niabridge: relay Linear issue webhooks to Nia and comment the analysis back.

The package is split into small layers:

``niabridge.relay``
    Idempotency tracking, event filtering, reconciliation and the
    ``RelayService`` that owns them.
``niabridge.nia``
    Async client for the Nia query API with caching and a one-shot
    simplified retry.
``niabridge.linear``
    Async GraphQL client for the Linear API.
``niabridge.api``
    Falcon ASGI application exposing the webhook and health endpoints.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
