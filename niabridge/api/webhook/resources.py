"""Webhook ingress resource for Linear issue events.

``POST /webhook`` acknowledges every delivery with HTTP 200 (``accepted``
or ``ignored``) so Linear does not redeliver, except when a signing secret
is configured and the signature does not verify. Qualifying issues are
marked in the relay's tracker before the response is produced, and the
analysis runs after the response has been sent.

Usage
-----
Register the resource on the Falcon app::

    app.add_route("/webhook", WebhookResource(relay, webhook_secret=secret))

"""

from __future__ import annotations

import typing as typ

import falcon

from niabridge.api.errors import WebhookSignatureError
from niabridge.api.webhook.signature import SIGNATURE_HEADER, verify_signature

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from niabridge.linear.models import IssueRef
    from niabridge.relay.service import RelayService

__all__ = ["WebhookResource"]


class WebhookResource:
    """Resource receiving Linear webhook deliveries.

    Parameters
    ----------
    relay
        Relay service that filters events and processes accepted issues.
    webhook_secret
        Linear signing secret. When ``None`` deliveries are not verified.

    """

    def __init__(
        self,
        relay: RelayService,
        *,
        webhook_secret: str | None = None,
    ) -> None:
        """Configure the resource with its relay and optional secret."""
        self._relay = relay
        self._webhook_secret = webhook_secret or None

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /webhook requests.

        Parameters
        ----------
        req
            Falcon request carrying the raw webhook body.
        resp
            Falcon response acknowledging the delivery.

        Raises
        ------
        WebhookSignatureError
            If a secret is configured and the signature does not verify.

        """
        body = await req.stream.read()
        self._verify(req, body)

        issue = self._relay.accept_body(body)
        resp.status = falcon.HTTP_200
        if issue is None:
            resp.media = {"result": "ignored"}
            return

        resp.media = {"result": "accepted"}
        resp.schedule(self._processor(issue))

    def _verify(self, req: Request, body: bytes) -> None:
        if self._webhook_secret is None:
            return
        signature = req.get_header(SIGNATURE_HEADER)
        if signature is None:
            raise WebhookSignatureError.missing(SIGNATURE_HEADER)
        if not verify_signature(self._webhook_secret, body, signature):
            raise WebhookSignatureError.mismatch()

    def _processor(
        self, issue: IssueRef
    ) -> typ.Callable[[], typ.Awaitable[None]]:
        relay = self._relay

        async def process() -> None:
            await relay.process(issue)

        return process
