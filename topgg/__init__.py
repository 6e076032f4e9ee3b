"""
Top.gg Client - Package Initializer
===================================

What: Async client for the Top.gg REST API plus a vote webhook receiver.
Who:  Imported by bots that post their stats and react to votes.

Package Layout:

    ┌─────────────────────────────────────┐
    │      main / routes (Receiver App)   │  ← optional FastAPI application
    ├─────────────────────────────────────┤
    │   webhook (Verifier + Adapters)     │  ← inbound vote notifications
    ├─────────────────────────────────────┤
    │   services (API Client + Transport) │  ← outbound REST calls
    ├─────────────────────────────────────┤
    │   config / exceptions / schemas     │  ← shared plumbing
    └─────────────────────────────────────┘

Quick start:

    async with TopggClient(token) as client:
        await client.post_stats({"server_count": 1200})
        voted = await client.has_voted("205680187394752512")
"""

__version__ = "1.0.0"

from topgg.exceptions import (  # noqa: E402
    ClientNotConfiguredError,
    HttpError,
    IdMissingError,
    InvalidBodyError,
    InvalidFieldTypeError,
    InvalidPayloadFormatError,
    InvalidResponseError,
    InvalidTokenStateError,
    MalformedRequestError,
    MalformedTokenError,
    MissingFieldsError,
    MissingIdError,
    MissingOrInvalidServerCountError,
    TopggError,
    TransportError,
    UnauthorizedError,
    WebhookError,
)
from topgg.services.api_client import TopggClient  # noqa: E402
from topgg.services.transport import HttpxTransport, Transport  # noqa: E402
from topgg.webhook import (  # noqa: E402
    DEFAULT_ASSIGN_KEY,
    TopggWebhookMiddleware,
    WebhookListener,
    listener,
    verify_and_parse,
)

__all__ = [
    "DEFAULT_ASSIGN_KEY",
    "ClientNotConfiguredError",
    "HttpError",
    "HttpxTransport",
    "IdMissingError",
    "InvalidBodyError",
    "InvalidFieldTypeError",
    "InvalidPayloadFormatError",
    "InvalidResponseError",
    "InvalidTokenStateError",
    "MalformedRequestError",
    "MalformedTokenError",
    "MissingFieldsError",
    "MissingIdError",
    "MissingOrInvalidServerCountError",
    "TopggClient",
    "TopggError",
    "TopggWebhookMiddleware",
    "Transport",
    "TransportError",
    "UnauthorizedError",
    "WebhookError",
    "WebhookListener",
    "listener",
    "verify_and_parse",
]
