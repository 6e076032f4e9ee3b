"""
Top.gg Client - REST API Client
===============================

What:  Typed async calls for every Top.gg endpoint the library supports.
How:   Each call checks its own preconditions, shapes parameters into the wire
       format, hands one request to the Transport, and unshapes the answer.
Who:   Used directly by bots; the receiver app keeps one instance on
       ``app.state``.

Endpoint Inventory:
    post_stats   POST /bots/stats
    get_stats    GET  /bots/stats
    get_bot      GET  /bots/{id}
    get_user     GET  /users/{id}         (deprecated upstream)
    get_bots     GET  /bots?...
    get_votes    GET  /bots/votes?page=N
    has_voted    GET  /bots/check?userId=...
    is_weekend   GET  /weekend

Request Construction:
    - every request carries ``authorization: <raw token>``
    - GET: a non-empty parameter dict becomes the query string, no payload
    - other methods: parameters are sent as a JSON payload with
      ``content-type: application/json``; no query string is ever appended
    - 2xx: body decoded as JSON, falling back to raw text; empty body → None
    - non-2xx: HttpError(status, body)
    - no response: TransportError(reason), raised by the transport

Calls are independent of each other. Nothing is cached or retried; callers
hitting 429s wrap these calls in their own backoff.
"""

import base64
import json
import logging
import time
import warnings
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

from pydantic import ValidationError

from topgg.config import settings
from topgg.exceptions import (
    HttpError,
    IdMissingError,
    InvalidResponseError,
    InvalidTokenStateError,
    MalformedTokenError,
    MissingIdError,
    MissingOrInvalidServerCountError,
)
from topgg.schemas.api import BotStats
from topgg.services.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

GET_USER_DEPRECATION = "[DeprecationWarning] get_user is no longer supported by Top.gg API v0."

# Optional post_stats fields forwarded when present
_SHARD_FIELDS = ("shard_count", "shards", "shard_id")


def validate_token(token: str) -> None:
    """
    Check that ``token`` looks like a Top.gg API token.

    The token must be three period-separated segments whose middle one is
    base64 (URL-safe or standard alphabet, padding optional) of a JSON
    document. What the JSON contains is irrelevant.

    This only sniffs the format. The signature is never verified, so a
    well-shaped forgery passes.

    Raises:
        MalformedTokenError:    Not exactly three segments.
        InvalidTokenStateError: Middle segment is not base64-encoded JSON.
    """
    if not isinstance(token, str):
        raise MalformedTokenError(context={"token_type": type(token).__name__})

    segments = token.split(".")
    if len(segments) != 3:
        raise MalformedTokenError(context={"segments": len(segments)})

    encoded = segments[1].replace("-", "+").replace("_", "/")
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        raw = base64.b64decode(padded, validate=True)
        json.loads(raw.decode("utf-8"))
    except ValueError as e:
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors
        raise InvalidTokenStateError(context={"error_type": type(e).__name__}) from e


def _is_valid_server_count(value: Any) -> bool:
    # bool is an int subclass; True must not count as one server
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0
    if isinstance(value, (list, tuple)):
        return len(value) > 0 and all(
            isinstance(v, int) and not isinstance(v, bool) for v in value
        )
    return False


def shape_bots_query(query: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Convert a BotsQuery into the parameters Top.gg expects.

    ``fields=["id", "username"]``      → ``fields="id, username"``
    ``search={"username": "shiro"}``   → ``search="username: shiro"``

    Every other key passes through untouched.
    """
    if query is None:
        return None

    shaped = dict(query)

    fields = shaped.get("fields")
    if isinstance(fields, (list, tuple)):
        shaped["fields"] = ", ".join(str(f) for f in fields)

    search = shaped.get("search")
    if isinstance(search, Mapping):
        shaped["search"] = " ".join(f"{key}: {value}" for key, value in search.items())

    return shaped


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _decode_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


class TopggClient:
    """
    Handle for the Top.gg REST API.

    The token, transport and base URL are fixed at construction and reused by
    every request. The handle carries no other state, so one instance may be
    shared by any number of concurrent tasks.

    Usage:
        async with TopggClient(token) as client:
            await client.post_stats({"server_count": 28199})

        # Share an existing connection pool:
        client = TopggClient(token, transport=HttpxTransport(http_client))
    """

    def __init__(
        self,
        token: str,
        *,
        transport: Optional[Transport] = None,
        base_url: Optional[str] = None,
    ):
        """
        Args:
            token:     Top.gg API token (header.payload.signature)
            transport: Transport executing requests (default: HttpxTransport)
            base_url:  API root (default: settings.api_base_url)

        Raises:
            MalformedTokenError, InvalidTokenStateError
        """
        validate_token(token)

        self._token = token
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport()
        self._base_url = (base_url or settings.api_base_url).rstrip("/")

    # ── Read-only handle ──────────────────────────────────────────────────

    @property
    def token(self) -> str:
        return self._token

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def __repr__(self) -> str:
        # Never include the token
        return f"TopggClient(base_url={self._base_url!r}, transport={type(self._transport).__name__})"

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "TopggClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # ══════════════════════════════════════════════════════════════════════
    # Endpoints
    # ══════════════════════════════════════════════════════════════════════

    async def post_stats(self, stats: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Post the bot's server count (and optional shard info) to Top.gg.

        Args:
            stats: ``{"server_count": int | [int, ...], "shard_count"?: int,
                   "shards"?: [int, ...], "shard_id"?: int}``

        Returns:
            The ``stats`` mapping, unchanged.

        Raises:
            MissingOrInvalidServerCountError: server_count missing, not
                positive, or an empty list. Raised before any request.
            HttpError, TransportError
        """
        server_count = stats.get("server_count") if isinstance(stats, Mapping) else None
        if not _is_valid_server_count(server_count):
            raise MissingOrInvalidServerCountError(
                context={"server_count_type": type(server_count).__name__}
            )

        body: Dict[str, Any] = {"server_count": server_count}
        for field in _SHARD_FIELDS:
            if stats.get(field) is not None:
                body[field] = stats[field]

        await self._request("POST", "/bots/stats", body)
        return stats

    async def get_stats(self) -> BotStats:
        """
        Fetch the statistics Top.gg holds for this bot.

        Returns:
            BotStats; ``server_count``/``shard_count`` are None when absent and
            ``shards`` defaults to an empty list.

        Raises:
            InvalidResponseError: A field Top.gg returned is not an integer
                (or list of integers for ``shards``).
            HttpError, TransportError
        """
        data = await self._request("GET", "/bots/stats")
        response = data if isinstance(data, dict) else {}

        stats: Dict[str, Any] = {"shards": response.get("shards") or []}
        for key in ("server_count", "shard_count"):
            if response.get(key) is not None:
                stats[key] = response[key]
        try:
            return BotStats(**stats)
        except ValidationError as e:
            logger.warning("Top.gg GET /bots/stats returned an unexpected body: %s", data)
            raise InvalidResponseError(
                body=data,
                context={"path": "/bots/stats", "errors": e.error_count()},
            ) from e

    async def get_bot(self, bot_id: Optional[str]) -> Any:
        """Fetch a bot's public listing. Returns the decoded body as-is."""
        if not isinstance(bot_id, str) or not bot_id:
            raise IdMissingError()
        return await self._request("GET", f"/bots/{quote(bot_id, safe='')}")

    async def get_user(self, user_id: Optional[str]) -> Any:
        """
        Fetch a user's Top.gg profile.

        Deprecated: Top.gg API v0 no longer serves this endpoint. The call is
        still made, after a DeprecationWarning and a log line.
        """
        if not isinstance(user_id, str) or not user_id:
            raise IdMissingError()

        warnings.warn(GET_USER_DEPRECATION, DeprecationWarning, stacklevel=2)
        logger.warning(GET_USER_DEPRECATION)
        return await self._request("GET", f"/users/{quote(user_id, safe='')}")

    async def get_bots(self, query: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Search the bot list.

        Args:
            query: Optional ``limit``, ``offset``, ``sort``, ``search`` (string or
                   ``{"field": "value"}`` mapping) and ``fields`` (string or list)

        Returns:
            Decoded body: ``{"results": [...], "limit", "offset", "count", "total"}``
        """
        return await self._request("GET", "/bots", shape_bots_query(query))

    async def get_votes(self, page: Optional[int] = None) -> Any:
        """Recent unique voters, at most 100 per page. ``page`` defaults to 1."""
        return await self._request("GET", "/bots/votes", {"page": page if page is not None else 1})

    async def has_voted(self, user_id: Optional[str]) -> bool:
        """
        Whether ``user_id`` voted for this bot in the last 12 hours.

        Top.gg reports ``voted`` as 0/1 or as a boolean; both become a bool.
        """
        if not isinstance(user_id, str) or not user_id:
            raise MissingIdError()

        data = await self._request("GET", "/bots/check", {"userId": user_id})
        voted = data.get("voted") if isinstance(data, dict) else None
        return bool(voted)

    async def is_weekend(self) -> Any:
        """Whether the weekend vote multiplier is active, as reported by Top.gg."""
        data = await self._request("GET", "/weekend")
        return data.get("is_weekend") if isinstance(data, dict) else None

    # ══════════════════════════════════════════════════════════════════════
    # Request plumbing
    # ══════════════════════════════════════════════════════════════════════

    def _build_request(
        self,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[str, Dict[str, str], Optional[str]]:
        """
        Returns:
            (url, headers, encoded_payload)
        """
        headers = {"authorization": self._token}
        url = f"{self._base_url}{path}"

        if method == "GET":
            params: List[Tuple[str, Any]] = [
                (key, _query_value(value))
                for key, value in (body or {}).items()
                if value is not None
            ]
            if params:
                url = f"{url}?{urlencode(params)}"
            return url, headers, None

        headers["content-type"] = "application/json"
        payload = json.dumps(body) if body is not None else None
        return url, headers, payload

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        method = method.upper()
        url, headers, payload = self._build_request(method, path, body)

        start_time = time.perf_counter()
        status, text = await self._transport.execute(method, url, headers, payload)
        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.debug("Top.gg %s %s -> %d in %.0fms", method, path, status, duration_ms)

        if not 200 <= status <= 299:
            logger.warning("Top.gg %s %s responded with HTTP %d", method, path, status)
            raise HttpError(
                status=status,
                body=text,
                context={"method": method, "path": path},
            )

        return _decode_body(text)
