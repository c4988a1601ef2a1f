"""Domain exceptions and Falcon error handlers for the API layer.

Usage
-----
Register error handlers on the Falcon app::

    from niabridge.api.errors import (
        WebhookSignatureError,
        handle_webhook_signature,
    )

    app.add_error_handler(WebhookSignatureError, handle_webhook_signature)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["WebhookSignatureError", "handle_webhook_signature"]


class WebhookSignatureError(Exception):
    """Raised when a webhook body does not match its signature header."""

    @classmethod
    def missing(cls, header: str) -> WebhookSignatureError:
        """Build an error for an absent signature header."""
        return cls(f"Missing {header} header")

    @classmethod
    def mismatch(cls) -> WebhookSignatureError:
        """Build an error for a signature that does not verify."""
        return cls("Webhook signature does not match request body")


async def handle_webhook_signature(
    _req: Request,
    resp: Response,
    ex: WebhookSignatureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``WebhookSignatureError`` to an HTTP 401 JSON response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The signature failure.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_401
    resp.media = {
        "title": "Invalid signature",
        "description": str(ex),
    }
