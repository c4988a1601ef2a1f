"""niabridge runtime entrypoint.

This module provides the ASGI application factory used by Granian. It
builds the relay service from the environment and delegates to
:func:`niabridge.api.app.create_app` for application construction, keeping
the ``niabridge.runtime:create_app`` entrypoint stable.

Configuration is driven by environment variables:

- ``NIABRIDGE_HOST``: Bind address (default ``0.0.0.0``)
- ``PORT``: Listen port (default ``3000``)
- ``NIABRIDGE_LOG_LEVEL``: Log level (default ``INFO``)
- ``LINEAR_API_KEY``, ``NIA_API_KEY``, ``REPO_NAME``: required credentials
  and target repository
- ``LINEAR_WEBHOOK_SECRET``: optional signing secret for deliveries

The remaining relay and query tunables are read by the ``from_env``
constructors of :class:`~niabridge.relay.config.RelayConfig` and
:class:`~niabridge.nia.config.NiaQueryConfig`.

Run the service directly with ``python -m niabridge.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from niabridge.linear.client import LinearGraphQLClient, LinearGraphQLConfig
from niabridge.linear.errors import LinearConfigError
from niabridge.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from niabridge.nia.cache import QueryCache
from niabridge.nia.client import NiaQueryClient
from niabridge.nia.config import NiaQueryConfig
from niabridge.nia.errors import NiaConfigError
from niabridge.relay.config import RelayConfig
from niabridge.relay.errors import RelayConfigError
from niabridge.relay.service import RelayService, RelayServiceDependencies

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["build_relay_service", "configure_from_env", "create_app", "main"]

logger = get_logger(__name__)

_DEFAULT_PORT = "3000"

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535

_CONFIG_ERRORS = (LinearConfigError, NiaConfigError, RelayConfigError)


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def configure_from_env() -> str:
    """Configure logging from ``NIABRIDGE_LOG_LEVEL`` and return the level."""
    log_level_str = os.environ.get("NIABRIDGE_LOG_LEVEL", "INFO")
    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid NIABRIDGE_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )
    return normalized_level


def build_relay_service() -> RelayService:
    """Build a relay service with clients configured from the environment.

    Raises
    ------
    SystemExit
        If a required variable is missing or a tunable is invalid.

    """
    try:
        nia_config = NiaQueryConfig.from_env()
        linear_config = LinearGraphQLConfig.from_env()
        relay_config = RelayConfig.from_env()
    except _CONFIG_ERRORS as exc:
        log_error(logger, "Invalid configuration: %s", exc)
        raise SystemExit(1) from exc

    analyser = NiaQueryClient(nia_config, cache=QueryCache())
    issue_tracker = LinearGraphQLClient(linear_config)
    return RelayService(
        RelayServiceDependencies(analyser=analyser, issue_tracker=issue_tracker),
        config=relay_config,
    )


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Builds the relay service from the environment so the app serves
    ``POST /webhook`` alongside ``/health`` and ``/ready``.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    from niabridge.api.app import AppDependencies
    from niabridge.api.app import create_app as _create_api_app

    configure_from_env()
    relay = build_relay_service()
    secret = os.environ.get("LINEAR_WEBHOOK_SECRET") or None
    if secret is None:
        log_warning(
            logger,
            "LINEAR_WEBHOOK_SECRET is not set; webhook signatures are not verified",
        )
    return _create_api_app(AppDependencies(relay=relay, webhook_secret=secret))


def main() -> None:
    """Start the niabridge server using Granian.

    Reads ``NIABRIDGE_HOST``, ``PORT`` and ``NIABRIDGE_LOG_LEVEL`` from the
    environment and starts the ASGI server with a single worker, since the
    idempotency tracker and cache live in process memory.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("NIABRIDGE_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("PORT", _DEFAULT_PORT))
    normalized_level = configure_from_env()

    log_info(
        logger,
        "Starting niabridge on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "niabridge.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
        workers=1,
    )
    server.serve()


if __name__ == "__main__":
    main()
