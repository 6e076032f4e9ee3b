"""
Top.gg Client - Configuration
=============================

What:  Centralized configuration using Pydantic Settings.
How:   Values come from environment variables prefixed with ``TOPGG_`` (or a
       ``.env`` file), are validated on load, and are exposed through the
       module-level ``settings`` singleton.
Who:   Read by the API client for its defaults and by the receiver app.
When:  Loaded once at import time.

Environment variables:
    TOPGG_TOKEN                  API token used by the receiver app's client
    TOPGG_API_BASE_URL           REST base address (default https://top.gg/api)
    TOPGG_REQUEST_TIMEOUT        Seconds before the HTTP transport gives up
    TOPGG_WEBHOOK_AUTHORIZATION  Shared secret expected on inbound webhooks
    TOPGG_WEBHOOK_PATH           Route the receiver app listens on
    TOPGG_WEBHOOK_ASSIGN_KEY     Request state key used by the middleware
    TOPGG_LOG_LEVEL              DEBUG / INFO / WARNING / ERROR / CRITICAL
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Settings loaded from the environment.

    Every value has a default, so the library can be imported and the client
    constructed with nothing configured. The receiver app needs ``token`` only
    for its client-backed routes.
    """

    # ── Top.gg REST API ───────────────────────────────────────────────────
    token: str = Field(default="", description="Top.gg API token")

    api_base_url: str = Field(default="https://top.gg/api")

    # Applied to the default httpx transport only. Custom transports carry
    # their own timeouts.
    request_timeout: float = Field(default=10.0, ge=1.0, le=120.0)

    # ── Webhook ───────────────────────────────────────────────────────────
    # None disables the authorization check entirely.
    webhook_authorization: Optional[str] = Field(default=None)

    webhook_path: str = Field(default="/webhooks/topgg")

    webhook_assign_key: str = Field(default="topgg_payload")

    # ── Logging ───────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are appended as ``/bots/...``; a trailing slash would double up."""
        return v.rstrip("/")

    @field_validator("webhook_path")
    @classmethod
    def validate_webhook_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"webhook_path must start with '/', got '{v}'")
        return v

    model_config = {
        "env_prefix": "TOPGG_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


settings = Settings()
