"""
Top.gg Client - Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── valid_token: Well-formed header.payload.signature token
    ├── make_client: TopggClient factory over an httpx.MockTransport
    ├── make_request: Starlette Request factory over a scripted receive()
    ├── test_settings: Settings for the receiver app (no environment involved)
    └── test_client: HTTPX AsyncClient talking to a fresh receiver app
"""

import base64
import json
import os
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any topgg imports
os.environ.pop("TOPGG_TOKEN", None)
os.environ.pop("TOPGG_WEBHOOK_AUTHORIZATION", None)
os.environ["TOPGG_LOG_LEVEL"] = "WARNING"

from topgg.config import Settings  # noqa: E402
from topgg.services.api_client import TopggClient  # noqa: E402
from topgg.services.transport import HttpxTransport  # noqa: E402

TEST_BASE_URL = "http://topgg.test/api"


def b64url(data: Dict[str, Any]) -> str:
    """URL-safe base64 of a JSON document, padding stripped."""
    raw = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


# ══════════════════════════════════════════════════════════════════════════
# API Client Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def valid_token() -> str:
    header = b64url({"alg": "HS256", "typ": "JWT"})
    payload = b64url({"id": "264811613708746752", "bot": True, "iat": 1700000000})
    return f"{header}.{payload}.c2lnbmF0dXJl"


@pytest.fixture
def make_client(valid_token):
    """
    Factory building a TopggClient whose requests are answered by ``handler``.

    Usage:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"voted": 1})

        client = make_client(handler)
        assert await client.has_voted("123") is True

    Every httpx.Request the client sends is appended to ``client.sent``.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> TopggClient:
        sent: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        client = TopggClient(
            valid_token,
            transport=HttpxTransport(http_client),
            base_url=TEST_BASE_URL,
        )
        client.sent = sent
        return client

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Webhook Fixtures
# ══════════════════════════════════════════════════════════════════════════


def build_scope(
    headers: Optional[List[tuple]] = None,
    method: str = "POST",
    path: str = "/webhook",
) -> Dict[str, Any]:
    raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in (headers or [])
    ]
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("ascii"),
        "query_string": b"",
        "root_path": "",
        "headers": raw_headers,
        "client": ("127.0.0.1", 12345),
        "server": ("test", 80),
    }


def scripted_receive(messages: List[Dict[str, Any]]):
    """receive() that plays ``messages`` in order, then reports a disconnect."""
    queue = list(messages)

    async def receive() -> Dict[str, Any]:
        if queue:
            return queue.pop(0)
        return {"type": "http.disconnect"}

    return receive


@pytest.fixture
def make_request():
    """
    Factory building a Starlette Request for the verifier.

    Usage:
        request = make_request(b'{"bot": "1"}', headers=[("authorization", "secret")])
        request = make_request(chunks=[b'{"bot"'], disconnect=True)

    ``body`` is delivered in a single message. ``chunks`` are delivered with
    ``more_body=True`` and, unless ``disconnect`` is set, a final empty message.
    """

    def _make(
        body: bytes = b"",
        headers: Optional[List[tuple]] = None,
        chunks: Optional[List[bytes]] = None,
        disconnect: bool = False,
    ) -> Request:
        if chunks is None:
            messages = [{"type": "http.request", "body": body, "more_body": False}]
        else:
            messages = [{"type": "http.request", "body": c, "more_body": True} for c in chunks]
            if not disconnect:
                messages.append({"type": "http.request", "body": b"", "more_body": False})
        return Request(build_scope(headers), scripted_receive(messages))

    return _make


@pytest.fixture
def vote_body() -> Dict[str, Any]:
    return {
        "bot": "264811613708746752",
        "user": "205680187394752512",
        "type": "upvote",
        "isWeekend": False,
        "query": "source=website&campaign=summer",
    }


# ══════════════════════════════════════════════════════════════════════════
# Receiver App Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        token="",
        webhook_authorization="webhook-secret",
        webhook_path="/webhooks/topgg",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def test_client(test_settings):
    """
    Provides an async HTTP test client for the receiver app.

    ASGITransport does not run the lifespan, so ``app.state.topgg_client``
    stays None unless a test sets it.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from topgg.main import create_app

    app = create_app(test_settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client.app = app
        yield client
