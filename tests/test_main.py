"""
Top.gg Client - Receiver App Tests
==================================

What:  End-to-end tests for the FastAPI receiver over httpx.ASGITransport.
How:   The shared TopggClient is swapped for one backed by httpx.MockTransport
       by assigning ``app.state.topgg_client`` directly.

What we test:
    ✅ Health route reflects configuration
    ✅ Webhook route verifies and logs votes
    ✅ Client-backed routes and their error mapping (400/502/503)
    ✅ Lifespan builds and closes the client
"""

import logging

import httpx
import pytest

from topgg.config import Settings
from topgg.main import create_app, lifespan
from topgg.services.api_client import TopggClient

SECRET = "webhook-secret"


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_reports_configuration(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["api_client"] == "unconfigured"
        assert data["webhook_auth"] is True
        assert data["uptime_seconds"] >= 0


class TestWebhookRoute:
    @pytest.mark.asyncio
    async def test_vote_accepted_and_logged(self, test_client, vote_body, caplog):
        vote_body["isWeekend"] = True

        with caplog.at_level(logging.INFO, logger="topgg.routes.votes"):
            response = await test_client.post(
                "/webhooks/topgg", json=vote_body, headers={"authorization": SECRET}
            )

        assert response.status_code == 204
        assert f"User {vote_body['user']} voted for bot {vote_body['bot']}" in caplog.text
        assert "weight=2" in caplog.text

    @pytest.mark.asyncio
    async def test_vote_without_secret_rejected(self, test_client, vote_body):
        response = await test_client.post("/webhooks/topgg", json=vote_body)

        assert response.status_code == 403
        assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_webhook_route_is_post_only(self, test_client):
        response = await test_client.get("/webhooks/topgg")
        assert response.status_code == 405

    @pytest.mark.asyncio
    async def test_vote_stored_under_configured_assign_key(self, vote_body, caplog):
        """The route reads the vote from request.state under webhook_assign_key."""
        app = create_app(Settings(webhook_assign_key="vote", webhook_authorization=None))
        route = next(r for r in app.router.routes if getattr(r, "path", None) == "/webhooks/topgg")
        assert route.app.assign_key == "vote"

        transport = httpx.ASGITransport(app=app)
        with caplog.at_level(logging.INFO, logger="topgg.routes.votes"):
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post("/webhooks/topgg", json=vote_body)

        assert response.status_code == 204
        assert f"User {vote_body['user']} voted" in caplog.text

    @pytest.mark.asyncio
    async def test_custom_webhook_path(self, vote_body):
        app = create_app(Settings(webhook_path="/votes", webhook_authorization=None))
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/votes", json=vote_body)

        assert response.status_code == 204


class TestClientRoutes:
    @pytest.mark.asyncio
    async def test_unconfigured_client_is_503(self, test_client):
        response = await test_client.get("/api/weekend")

        assert response.status_code == 503
        assert response.json()["error"] == "not_configured"

    @pytest.mark.asyncio
    async def test_vote_check(self, test_client, make_client):
        test_client.app.state.topgg_client = make_client(
            lambda request: httpx.Response(200, json={"voted": 1})
        )

        response = await test_client.get("/api/votes/205680187394752512")

        assert response.status_code == 200
        assert response.json() == {"user": "205680187394752512", "voted": True}

    @pytest.mark.asyncio
    async def test_weekend(self, test_client, make_client):
        test_client.app.state.topgg_client = make_client(
            lambda request: httpx.Response(200, json={"is_weekend": False})
        )

        response = await test_client.get("/api/weekend")

        assert response.status_code == 200
        assert response.json() == {"is_weekend": False}

    @pytest.mark.asyncio
    async def test_upstream_error_is_502(self, test_client, make_client):
        test_client.app.state.topgg_client = make_client(
            lambda request: httpx.Response(401, json={"error": "Unauthorized"})
        )

        response = await test_client.get("/api/weekend")

        assert response.status_code == 502
        assert response.json() == {
            "error": "upstream_error",
            "message": "Top.gg API responded with HTTP 401",
        }

    @pytest.mark.asyncio
    async def test_unreachable_upstream_is_503(self, test_client, make_client):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        test_client.app.state.topgg_client = make_client(handler)

        response = await test_client.get("/api/votes/1")

        assert response.status_code == 503
        assert response.json()["error"] == "upstream_unavailable"

    @pytest.mark.asyncio
    async def test_bot_stats(self, test_client, make_client):
        test_client.app.state.topgg_client = make_client(
            lambda request: httpx.Response(200, json={"server_count": 42})
        )

        response = await test_client.get("/api/stats")

        assert response.status_code == 200
        assert response.json() == {"server_count": 42, "shard_count": None, "shards": []}

    @pytest.mark.asyncio
    async def test_malformed_upstream_body_is_502(self, test_client, make_client):
        test_client.app.state.topgg_client = make_client(
            lambda request: httpx.Response(200, json={"shards": "lots"})
        )

        response = await test_client.get("/api/stats")

        assert response.status_code == 502
        assert response.json() == {
            "error": "upstream_error",
            "message": "Top.gg API returned an unexpected response",
        }

    @pytest.mark.asyncio
    async def test_error_schema_documented(self, test_client):
        schema = (await test_client.get("/openapi.json")).json()

        assert "ErrorResponse" in schema["components"]["schemas"]
        responses = schema["paths"]["/api/weekend"]["get"]["responses"]
        for status in ("502", "503"):
            assert responses[status]["content"]["application/json"]["schema"] == {
                "$ref": "#/components/schemas/ErrorResponse"
            }


class TestLifespan:
    @pytest.mark.asyncio
    async def test_client_created_and_closed(self, valid_token, monkeypatch):
        monkeypatch.setattr("topgg.main.setup_logging", lambda level=None: None)
        app = create_app(Settings(token=valid_token, api_base_url="http://topgg.test/api"))

        async with lifespan(app):
            client = app.state.topgg_client
            assert isinstance(client, TopggClient)
            assert client.base_url == "http://topgg.test/api"

        assert app.state.topgg_client is None
        assert client.transport.client.is_closed

    @pytest.mark.asyncio
    async def test_malformed_token_leaves_client_unset(self, monkeypatch):
        monkeypatch.setattr("topgg.main.setup_logging", lambda level=None: None)
        app = create_app(Settings(token="not-a-token"))

        async with lifespan(app):
            assert app.state.topgg_client is None
