"""
Top.gg Client - Exception Hierarchy
===================================

What:  One exception class per failure kind, for both the REST client and the
       webhook verifier.
How:   Each exception carries a human-readable message, an optional context
       dict, and the data specific to its kind (HTTP status, missing field
       names, ...). Callers branch on the class.
Who:   Raised by the API client, the transport, and the webhook verifier;
       converted to HTTP responses by the webhook adapters and the receiver
       app's exception handlers.

Exception Hierarchy:
    TopggError (base)
    ├── MalformedTokenError               token is not header.payload.signature
    ├── InvalidTokenStateError            token payload segment is not base64 JSON
    ├── MissingOrInvalidServerCountError  post_stats precondition
    ├── IdMissingError                    get_bot / get_user precondition
    ├── MissingIdError                    has_voted precondition
    ├── HttpError                         Top.gg answered with a non-2xx status
    ├── TransportError                    no response was received at all
    ├── InvalidResponseError              2xx body with an unexpected shape
    ├── ClientNotConfiguredError          receiver app has no API token
    └── WebhookError                      inbound vote rejected
        ├── UnauthorizedError             → 403
        ├── InvalidBodyError              → 400
        ├── MalformedRequestError         → 422
        ├── InvalidPayloadFormatError     → 400
        ├── MissingFieldsError            → 400
        └── InvalidFieldTypeError         → 400

Precondition errors are raised before any network call is made. None of these
errors are retried by the library.
"""

from typing import Any, Dict, List, Optional


class TopggError(Exception):
    """
    Base exception for all library errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info (logged, never sent to webhook callers)
    """

    def __init__(
        self,
        message: str = "An unexpected Top.gg error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


# ══════════════════════════════════════════════════════════════════════════
# Client construction
# ══════════════════════════════════════════════════════════════════════════


class MalformedTokenError(TopggError):
    """The token does not split into exactly three period-separated segments."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Got a malformed API token.", context=context)


class InvalidTokenStateError(TopggError):
    """
    The token has three segments but its middle one is not base64-encoded JSON.

    Only the token's shape is checked. Its signature is never verified and
    the decoded claims are never read.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Invalid API token state, this should not happen! Please report!",
            context=context,
        )


# ══════════════════════════════════════════════════════════════════════════
# Client preconditions (no network call made)
# ══════════════════════════════════════════════════════════════════════════


class MissingOrInvalidServerCountError(TopggError):
    """``server_count`` is absent, not positive, or an empty list."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Missing or invalid server count", context=context)


class IdMissingError(TopggError):
    """A bot or user lookup was called without an ID."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="ID missing", context=context)


class MissingIdError(TopggError):
    """``has_voted`` was called without a user ID."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Missing ID", context=context)


# ══════════════════════════════════════════════════════════════════════════
# Client request failures
# ══════════════════════════════════════════════════════════════════════════


class HttpError(TopggError):
    """
    Top.gg answered with a status outside 200-299.

    Attributes:
        status:  HTTP status code
        body:    Raw response body, undecoded

    A 429 lands here like any other status. Backing off is up to the caller.
    """

    def __init__(
        self,
        status: int,
        body: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["status"] = status
        super().__init__(message=f"Top.gg API responded with HTTP {status}", context=ctx)
        self.status = status
        self.body = body


class TransportError(TopggError):
    """
    The request never produced a response (DNS failure, refused connection,
    timeout, TLS error, ...).

    Attributes:
        reason:  The transport's own description of the failure
    """

    def __init__(self, reason: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"Top.gg API request failed: {reason}", context=context)
        self.reason = reason


class InvalidResponseError(TopggError):
    """
    Top.gg answered 2xx but the body does not have the documented shape.

    Attributes:
        body:  The decoded body that failed validation
    """

    def __init__(self, body: Any = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Top.gg API returned an unexpected response", context=context)
        self.body = body


class ClientNotConfiguredError(TopggError):
    """The receiver app was asked to call Top.gg but has no token configured."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Top.gg API client is not configured. Set TOPGG_TOKEN and restart.",
            context=context,
        )


# ══════════════════════════════════════════════════════════════════════════
# Webhook verification
# ══════════════════════════════════════════════════════════════════════════


class WebhookError(TopggError):
    """
    Base for inbound webhook rejections.

    Every subclass knows the HTTP status it maps to, so both webhook adapters
    render the same ``{"error": message}`` body without a lookup table.
    These are deterministic, input-derived classifications; retrying the same
    request yields the same error.
    """

    status_code: int = 400

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class UnauthorizedError(WebhookError):
    """Authorization header absent, repeated, or not equal to the secret."""

    status_code = 403

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Unauthorized", context=context)


class InvalidBodyError(WebhookError):
    """The request body is not valid JSON."""

    status_code = 400

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid body", context=context)


class MalformedRequestError(WebhookError):
    """The request body could not be read in full."""

    status_code = 422

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Malformed request", context=context)


class InvalidPayloadFormatError(WebhookError):
    """The body is valid JSON but not an object."""

    status_code = 400

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid payload format", context=context)


class MissingFieldsError(WebhookError):
    """
    One or more required keys are absent.

    Attributes:
        fields:  Missing key names, in ``bot``, ``user``, ``type`` order
    """

    status_code = 400

    def __init__(self, fields: List[str], context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Missing required fields: {', '.join(fields)}",
            context=context,
        )
        self.fields = list(fields)


class InvalidFieldTypeError(WebhookError):
    """
    A present field has the wrong JSON type.

    Attributes:
        field:  The first offending key
    """

    status_code = 400

    def __init__(self, field: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"Invalid type for field: {field}", context=context)
        self.field = field
