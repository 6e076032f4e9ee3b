"""
Top.gg Client - Webhook Response Helpers
========================================

What:  Send-once response plumbing shared by the webhook middleware and the
       webhook listener.
How:   ``track_response`` wraps the ASGI ``send`` callable and marks the scope
       as soon as ``http.response.start`` goes out. Every helper here checks
       that mark first, so no exit path can emit a second response on the same
       connection.
"""

from typing import Any, Dict

from starlette.responses import JSONResponse, Response
from starlette.types import Message, Receive, Scope, Send

# Scope key set once a response has started on the connection
RESPONSE_STARTED_KEY = "topgg.response_started"


def response_started(scope: Scope) -> bool:
    return bool(scope.get(RESPONSE_STARTED_KEY))


def track_response(scope: Scope, send: Send) -> Send:
    """Wrap ``send`` so the scope records when the response begins."""

    async def tracked_send(message: Message) -> None:
        if message["type"] == "http.response.start":
            scope[RESPONSE_STARTED_KEY] = True
        await send(message)

    return tracked_send


async def send_response(scope: Scope, receive: Receive, send: Send, response: Response) -> bool:
    """
    Send ``response`` unless one already started.

    Returns:
        True if the response was sent, False if it was skipped.
    """
    if response_started(scope):
        return False
    await response(scope, receive, send)
    return True


async def send_error_response(
    scope: Scope,
    receive: Receive,
    send: Send,
    status_code: int,
    message: str,
) -> bool:
    """Send ``{"error": message}`` with ``status_code`` unless a response already started."""
    body: Dict[str, Any] = {"error": message}
    return await send_response(scope, receive, send, JSONResponse(body, status_code=status_code))


async def send_empty_response(scope: Scope, receive: Receive, send: Send, status_code: int = 204) -> bool:
    """Send a body-less response (204 by default) unless a response already started."""
    return await send_response(scope, receive, send, Response(status_code=status_code))
