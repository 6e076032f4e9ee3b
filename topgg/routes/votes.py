"""
Top.gg Client - Vote Routes
===========================

What:  The vote webhook handler plus two read-only routes backed by the API
       client.
Who:   ``receive_vote`` is mounted at ``webhook_path`` behind
       TopggWebhookMiddleware by ``create_app``; the router is included as-is.

Routes:
    GET /api/votes/{user_id}  → {"user": "...", "voted": true}
    GET /api/weekend          → {"is_weekend": false}
    GET /api/stats            → {"server_count": 42, "shard_count": null, "shards": []}
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from topgg.exceptions import ClientNotConfiguredError
from topgg.schemas.api import BotStats, ErrorResponse, VoteCheckResponse, WeekendResponse
from topgg.services.api_client import TopggClient

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Votes"],
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid ID"},
        502: {"model": ErrorResponse, "description": "Top.gg rejected the request"},
        503: {"model": ErrorResponse, "description": "Top.gg unreachable or no token configured"},
    },
)


def get_client(request: Request) -> TopggClient:
    """Dependency: the app's shared TopggClient, created at startup when a token is set."""
    client = getattr(request.app.state, "topgg_client", None)
    if client is None:
        raise ClientNotConfiguredError(context={"path": request.url.path})
    return client


async def on_vote(vote: Dict[str, Any], request: Request) -> None:
    """Log the vote."""
    weight = 2 if vote.get("isWeekend") else 1
    logger.info(
        "User %s voted for bot %s (type=%s, weight=%d)",
        vote["user"],
        vote["bot"],
        vote["type"],
        weight,
    )
    if isinstance(vote.get("query"), dict) and vote["query"]:
        logger.debug("Vote query parameters: %s", vote["query"])


@router.get(
    "/votes/{user_id}",
    response_model=VoteCheckResponse,
    summary="Check whether a user voted in the last 12 hours",
)
async def check_vote(
    user_id: str,
    client: TopggClient = Depends(get_client),
) -> VoteCheckResponse:
    voted = await client.has_voted(user_id)
    return VoteCheckResponse(user=user_id, voted=voted)


@router.get(
    "/weekend",
    response_model=WeekendResponse,
    summary="Check whether the weekend vote multiplier is active",
)
async def weekend(client: TopggClient = Depends(get_client)) -> WeekendResponse:
    return WeekendResponse(is_weekend=bool(await client.is_weekend()))


@router.get(
    "/stats",
    response_model=BotStats,
    summary="Statistics Top.gg holds for this bot",
)
async def bot_stats(client: TopggClient = Depends(get_client)) -> BotStats:
    return await client.get_stats()


async def receive_vote(request: Request) -> Response:
    """
    Endpoint behind TopggWebhookMiddleware. By the time it runs the vote has
    been verified and stored on ``request.state`` under the configured key.
    """
    assign_key = request.app.state.settings.webhook_assign_key
    await on_vote(getattr(request.state, assign_key), request)
    return Response(status_code=204)
