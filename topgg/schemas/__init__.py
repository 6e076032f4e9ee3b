"""Pydantic schemas shared by the API client and the receiver app."""

from topgg.schemas.api import (
    BotStats,
    ErrorResponse,
    HealthResponse,
    VoteCheckResponse,
    WeekendResponse,
)

__all__ = [
    "BotStats",
    "ErrorResponse",
    "HealthResponse",
    "VoteCheckResponse",
    "WeekendResponse",
]
