"""
Top.gg Client - Webhook Verification Pipeline
=============================================

What:  Turns a raw inbound vote request into a validated payload dict, or
       raises the WebhookError subclass that classifies what was wrong.
How:   Four stages run in order; the first one to fail raises and the rest
       never run.
Who:   The single source of truth behind TopggWebhookMiddleware and
       WebhookListener. Call it directly for full control.

Pipeline:
    ┌────────────┐    ┌────────────┐    ┌────────────┐    ┌──────────────────┐
    │ Authorize  │───▶│ Read body  │───▶│ Parse JSON │───▶│ Validate & shape │
    └────────────┘    └────────────┘    └────────────┘    └──────────────────┘
     Unauthorized      MalformedRequest  InvalidBody       InvalidPayloadFormat
                                                          MissingFields
                                                          InvalidFieldType

Payload Schema (Top.gg → us):
    bot        str   required   ID of the bot that was voted for
    user       str   required   ID of the user who voted
    type       str   required   "upvote" or "test"
    isWeekend  bool  optional   weekend votes count double
    query      str   optional   query string of the vote page URL, decoded
               or dict          into a dict on success

Nothing here logs, mutates shared state, or sends a response.
"""

import json
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import parse_qsl

from starlette.requests import ClientDisconnect, Request

from topgg.exceptions import (
    InvalidBodyError,
    InvalidFieldTypeError,
    InvalidPayloadFormatError,
    MalformedRequestError,
    MissingFieldsError,
    UnauthorizedError,
)

REQUIRED_FIELDS = ("bot", "user", "type")


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_query(value: Any) -> bool:
    return isinstance(value, (str, dict))


# (field, type check, required), checked in this order
FIELD_TYPES: Tuple[Tuple[str, Callable[[Any], bool], bool], ...] = (
    ("bot", _is_str, True),
    ("user", _is_str, True),
    ("type", _is_str, True),
    ("isWeekend", _is_bool, False),
    ("query", _is_query, False),
)


async def verify_and_parse(
    request: Request,
    authorization: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Verify and parse a Top.gg vote webhook.

    Args:
        request:        The inbound Starlette request
        authorization:  Expected ``authorization`` header value. None skips
                        the check.

    Returns:
        The validated payload. A non-empty string ``query`` has been replaced
        by its decoded ``{key: value}`` form.

    Raises:
        UnauthorizedError:          Header absent, repeated, or mismatched (403)
        MalformedRequestError:      Body could not be read in full (422)
        InvalidBodyError:           Body is not valid JSON (400)
        InvalidPayloadFormatError:  JSON is not an object (400)
        MissingFieldsError:         bot/user/type absent (400)
        InvalidFieldTypeError:      A field has the wrong type (400)

    Example:
        try:
            payload = await verify_and_parse(request, "my_webhook_secret")
        except WebhookError as exc:
            return JSONResponse({"error": exc.message}, status_code=exc.status_code)
    """
    authorize(request, authorization)
    body = await read_body(request)
    payload = parse_body(body)
    validate_payload(payload)
    return format_incoming(payload)


# ══════════════════════════════════════════════════════════════════════════
# Stages
# ══════════════════════════════════════════════════════════════════════════


def authorize(request: Request, authorization: Optional[str]) -> None:
    """Require exactly one ``authorization`` header equal to the secret."""
    if authorization is None:
        return

    values = request.headers.getlist("authorization")
    if len(values) != 1 or values[0] != authorization:
        raise UnauthorizedError(context={"header_count": len(values)})


async def read_body(request: Request) -> bytes:
    """
    Read the complete request body.

    A client disconnect mid-body, or a body whose length disagrees with the
    declared Content-Length, counts as a partial read.
    """
    try:
        body = await request.body()
    except ClientDisconnect as e:
        raise MalformedRequestError(context={"reason": "client_disconnect"}) from e

    declared = request.headers.get("content-length")
    if declared is not None and declared.strip().isdigit() and int(declared) != len(body):
        raise MalformedRequestError(
            context={"reason": "incomplete_body", "declared": int(declared), "received": len(body)}
        )
    return body


def parse_body(body: bytes) -> Any:
    try:
        return json.loads(body.decode("utf-8"))
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise InvalidBodyError(context={"error_type": type(e).__name__}) from e


def validate_payload(payload: Any) -> None:
    """
    Check shape, presence, then types.

    Presence is checked for all required fields before any type check, so a
    payload missing ``user`` reports MissingFields even if ``bot`` is also
    mistyped. An optional field holding JSON null counts as absent.
    """
    if not isinstance(payload, dict):
        raise InvalidPayloadFormatError(context={"payload_type": type(payload).__name__})

    missing = [field for field in REQUIRED_FIELDS if field not in payload]
    if missing:
        raise MissingFieldsError(missing)

    for field, check, required in FIELD_TYPES:
        value = payload.get(field)
        if value is None and not required:
            continue
        if not check(value):
            raise InvalidFieldTypeError(field)


def format_incoming(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Decode a non-empty string ``query`` in place; anything else passes through."""
    query = payload.get("query")
    if isinstance(query, str) and query:
        payload["query"] = parse_query(query)
    return payload


def parse_query(query: str) -> Dict[str, str]:
    """
    ``"source=website&campaign=test"`` → ``{"source": "website", "campaign": "test"}``

    Values are form-URL-decoded (``+`` is a space), blank values are kept, and
    a repeated key keeps its last value.
    """
    return dict(parse_qsl(query, keep_blank_values=True))
