"""
Top.gg Client - Webhook Middleware
==================================

What:  ASGI middleware that verifies Top.gg vote webhooks before the wrapped
       app sees them.
How:   Runs verify_and_parse on every HTTP request. On success the payload is
       stored on ``request.state.<assign_key>`` and the request continues with
       its body replayed. On failure the error response is sent and the chain
       stops.
Who:   Mount it on the route (or sub-app) that receives Top.gg webhooks.

Usage:
    app = Starlette(
        routes=[Route("/webhook", vote_endpoint, methods=["POST"])],
        middleware=[Middleware(TopggWebhookMiddleware, authorization="secret")],
    )

    async def vote_endpoint(request):
        vote = request.state.topgg_payload
"""

from typing import Optional

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from topgg.exceptions import WebhookError
from topgg.webhook.responses import response_started, send_error_response, track_response
from topgg.webhook.verifier import verify_and_parse

DEFAULT_ASSIGN_KEY = "topgg_payload"


class TopggWebhookMiddleware:
    """
    Pure ASGI middleware; BaseHTTPMiddleware would buffer the response and hide
    whether one has already started.
    """

    def __init__(
        self,
        app: ASGIApp,
        authorization: Optional[str] = None,
        assign_key: str = DEFAULT_ASSIGN_KEY,
    ):
        self.app = app
        self.authorization = authorization
        self.assign_key = assign_key

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # A response already went out on this connection; do nothing at all
        if response_started(scope):
            return

        send = track_response(scope, send)
        request = Request(scope, receive)

        try:
            payload = await verify_and_parse(request, self.authorization)
        except WebhookError as exc:
            await send_error_response(scope, receive, send, exc.status_code, exc.message)
            return

        setattr(request.state, self.assign_key, payload)

        # The body stream is spent; hand the bytes back to whoever reads next
        body = await request.body()
        await self.app(scope, _replay_receive(body, receive), send)


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay
