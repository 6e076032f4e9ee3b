"""
Top.gg Client - Pydantic Schemas
================================

What:  Typed shapes returned by the API client and by the receiver app.
How:   Plain pydantic models. Request bodies the client sends stay plain
       dicts, since Top.gg accepts them as given.
Who:   BotStats is returned by ``TopggClient.get_stats``; the response models
       back the receiver app's routes and OpenAPI docs.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# API client models
# ══════════════════════════════════════════════════════════════════════════


class BotStats(BaseModel):
    """
    Statistics Top.gg holds for the authenticated bot.

    ``server_count`` and ``shard_count`` stay None when the API omits them;
    ``shards`` is always a list.
    """

    server_count: Optional[int] = Field(default=None, description="Total guild count")
    shard_count: Optional[int] = Field(default=None, description="Number of shards")
    shards: List[int] = Field(default_factory=list, description="Guild count per shard")


# ══════════════════════════════════════════════════════════════════════════
# Receiver app response models
# ══════════════════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    status: str = Field(description="Always 'ok' while the process serves requests")
    version: str = Field(description="Installed package version")
    api_client: str = Field(description="'configured' or 'unconfigured'")
    webhook_auth: bool = Field(description="Whether inbound webhooks require authorization")
    uptime_seconds: float = Field(description="Seconds since the app module loaded")


class VoteCheckResponse(BaseModel):
    user: str = Field(description="Discord user snowflake that was checked")
    voted: bool = Field(description="Whether the user voted in the last 12 hours")


class WeekendResponse(BaseModel):
    is_weekend: bool = Field(description="Whether the weekend vote multiplier is active")


class ErrorResponse(BaseModel):
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable explanation")
