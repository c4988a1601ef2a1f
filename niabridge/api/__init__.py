"""niabridge HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that receives Linear webhooks and exposes health
probes.

Usage
-----
Create and run the application::

    from niabridge.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # full mode with the webhook endpoint

Public API
----------
create_app
    Application factory that configures the Falcon ASGI app with health
    endpoints and, when a relay service is provided, the webhook endpoint
    and the tracker eviction lifespan hook.
AppDependencies
    Collaborators for the full application.
"""

from niabridge.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
