"""
Top.gg Client - Webhook Listener
================================

What:  Wraps a vote handler into an ASGI endpoint that verifies, dispatches
       and always answers exactly once.
How:   verify_and_parse → handler(payload, request) → response.

Response Rules:
    ┌────────────────────────────────┬──────────────────────────────────────┐
    │ Outcome                        │ Response                             │
    ├────────────────────────────────┼──────────────────────────────────────┤
    │ Response already started       │ nothing                              │
    │ Verification failed            │ mapped status, {"error": message}    │
    │ Handler returned a Response    │ that Response                        │
    │ Handler returned anything else │ 204 No Content                       │
    │ Handler raised                 │ error_handler(exc), then 500         │
    └────────────────────────────────┴──────────────────────────────────────┘

The handler may be a plain function or a coroutine function. Plain functions
run in the threadpool so blocking work never stalls the event loop.
"""

import inspect
import logging
from typing import Any, Callable, Dict, Optional

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from topgg.exceptions import WebhookError
from topgg.webhook.responses import (
    response_started,
    send_empty_response,
    send_error_response,
    send_response,
    track_response,
)
from topgg.webhook.verifier import verify_and_parse

logger = logging.getLogger(__name__)

VoteHandler = Callable[[Dict[str, Any], Request], Any]
ErrorHandler = Callable[[BaseException], Any]

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _log_handler_error(exc: BaseException) -> None:
    logger.error(
        "Webhook handler failed: %s", exc, exc_info=(type(exc), exc, exc.__traceback__)
    )


class WebhookListener:
    """
    ASGI app for a single Top.gg webhook route.

    Usage:
        async def on_vote(vote, request):
            await grant_reward(vote["user"])

        app.add_route("/webhook", WebhookListener(on_vote, authorization="secret"),
                      methods=["POST"])
    """

    def __init__(
        self,
        handler: VoteHandler,
        authorization: Optional[str] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.handler = handler
        self.authorization = authorization
        self.error_handler = error_handler or _log_handler_error

    async def _dispatch(self, payload: Dict[str, Any], request: Request) -> Any:
        if inspect.iscoroutinefunction(self.handler):
            return await self.handler(payload, request)

        result = await run_in_threadpool(self.handler, payload, request)
        # Plain callables may still hand back a coroutine (a lambda over an async def)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if response_started(scope):
            return

        send = track_response(scope, send)
        request = Request(scope, receive)

        try:
            payload = await verify_and_parse(request, self.authorization)
        except WebhookError as exc:
            await send_error_response(scope, receive, send, exc.status_code, exc.message)
            return

        try:
            result = await self._dispatch(payload, request)
        except Exception as exc:
            try:
                outcome = self.error_handler(exc)
                if inspect.isawaitable(outcome):
                    await outcome
            finally:
                await send_error_response(scope, receive, send, 500, INTERNAL_ERROR_MESSAGE)
            return

        if isinstance(result, Response):
            await send_response(scope, receive, send, result)
        else:
            await send_empty_response(scope, receive, send)


def listener(
    handler: VoteHandler,
    *,
    authorization: Optional[str] = None,
    error_handler: Optional[ErrorHandler] = None,
) -> WebhookListener:
    """Build a WebhookListener; handy as a decorator-free one-liner."""
    return WebhookListener(handler, authorization=authorization, error_handler=error_handler)
