"""
Top.gg Client - Receiver Application Factory
============================================

What:  A ready-to-run FastAPI app that receives Top.gg vote webhooks and
       exposes a couple of read-only routes backed by the API client.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Served by any ASGI server (``uvicorn topgg.main:app``).
When:  Once at startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────────┐                                    │
    │  │  Access Log  │                                    │
    │  └──────────────┘                                    │
    │                                                      │
    │  Routes:                                             │
    │  ┌──────────────────┐ ┌──────────────┐ ┌──────────┐  │
    │  │ POST webhook_path│ │ GET /api/... │ │ /health  │  │
    │  └──────────────────┘ └──────────────┘ └──────────┘  │
    │   ↑ TopggWebhookMiddleware (route-scoped)            │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ Precondition→400 │ Http→502 │ Transport→503    │  │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, build the shared TopggClient if a token is set
    Shutdown:  close the client's HTTP connections
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware import Middleware
from starlette.routing import Route

from topgg import __version__
from topgg.config import Settings, settings
from topgg.exceptions import (
    ClientNotConfiguredError,
    HttpError,
    IdMissingError,
    InvalidResponseError,
    MissingIdError,
    MissingOrInvalidServerCountError,
    TopggError,
    TransportError,
)
from topgg.middleware.logging import RequestLoggingMiddleware
from topgg.routes import health, votes
from topgg.services.api_client import TopggClient
from topgg.webhook.middleware import TopggWebhookMiddleware

logger = logging.getLogger(__name__)

PRECONDITION_ERRORS = (MissingOrInvalidServerCountError, IdMissingError, MissingIdError)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger for the receiver app.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    The library modules never configure logging themselves; only the app does.
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # httpx logs every request at INFO
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the shared TopggClient on startup and close it on shutdown.

    A missing or malformed token does not stop the app: the webhook route
    keeps working and the client-backed routes answer 503.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    config: Settings = app.state.settings
    setup_logging(config.log_level)
    logger.info("Top.gg receiver starting up (version %s)", __version__)

    if config.token:
        try:
            app.state.topgg_client = TopggClient(config.token, base_url=config.api_base_url)
        except TopggError as e:
            logger.error("Configuration error: %s", e.message)
    else:
        logger.warning("TOPGG_TOKEN is not set; /api routes will answer 503")

    if config.webhook_authorization is None:
        logger.warning("TOPGG_WEBHOOK_AUTHORIZATION is not set; webhooks are not authenticated")

    logger.info("Listening for votes on POST %s", config.webhook_path)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    client: Optional[TopggClient] = app.state.topgg_client
    if client is not None:
        await client.aclose()
        app.state.topgg_client = None

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map client exceptions to HTTP responses.

    Handler hierarchy:
        Precondition errors       → 400 Bad Request
        HttpError                 → 502 Bad Gateway (Top.gg said no)
        InvalidResponseError      → 502 Bad Gateway (Top.gg answered nonsense)
        TransportError            → 503 Service Unavailable (Top.gg unreachable)
        ClientNotConfiguredError  → 503 Service Unavailable
        Exception (fallback)      → 500 Internal Server Error

    Responses never include Top.gg's raw body or a stack trace.
    """

    async def handle_precondition_error(request: Request, exc: TopggError):
        logger.warning("Rejected request: %s", exc.message)
        return JSONResponse(
            status_code=400,
            content={"error": "bad_request", "message": exc.message},
        )

    for exc_class in PRECONDITION_ERRORS:
        app.add_exception_handler(exc_class, handle_precondition_error)

    @app.exception_handler(HttpError)
    async def handle_http_error(request: Request, exc: HttpError):
        logger.error("Top.gg API error: HTTP %d | Context: %s", exc.status, exc.context)
        return JSONResponse(
            status_code=502,
            content={"error": "upstream_error", "message": exc.message},
        )

    @app.exception_handler(InvalidResponseError)
    async def handle_invalid_response(request: Request, exc: InvalidResponseError):
        logger.error("Top.gg API returned an unexpected body | Context: %s", exc.context)
        return JSONResponse(
            status_code=502,
            content={"error": "upstream_error", "message": exc.message},
        )

    @app.exception_handler(TransportError)
    async def handle_transport_error(request: Request, exc: TransportError):
        logger.error("Top.gg API unreachable: %s", exc.reason)
        return JSONResponse(
            status_code=503,
            content={"error": "upstream_unavailable", "message": "Top.gg API is unreachable"},
        )

    @app.exception_handler(ClientNotConfiguredError)
    async def handle_not_configured(request: Request, exc: ClientNotConfiguredError):
        return JSONResponse(
            status_code=503,
            content={"error": "not_configured", "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the receiver app.

    Args:
        config: Settings to use instead of the environment-loaded singleton.
                Tests pass their own.
    """
    config = config or settings

    app = FastAPI(
        title="Top.gg Vote Receiver",
        description="Receives Top.gg vote webhooks and answers vote lookups.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.topgg_client = None

    # ── Register Middleware ───────────────────────────────────────────────
    app.add_middleware(RequestLoggingMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(votes.router)

    # Verified votes reach receive_vote on request.state.<webhook_assign_key>
    app.router.routes.append(
        Route(
            config.webhook_path,
            votes.receive_vote,
            methods=["POST"],
            middleware=[
                Middleware(
                    TopggWebhookMiddleware,
                    authorization=config.webhook_authorization,
                    assign_key=config.webhook_assign_key,
                )
            ],
        )
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
