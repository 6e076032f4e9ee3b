"""
Top.gg Client - Health Check Route
==================================

What:  Liveness check for the receiver app.
How:   Reports local state only. It never calls Top.gg, so a Top.gg outage
       does not take the receiver out of rotation.
"""

import time

from fastapi import APIRouter, Request

from topgg import __version__
from topgg.schemas.api import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Report version, uptime, and whether the client and webhook secret are configured."""
    client = getattr(request.app.state, "topgg_client", None)
    config = request.app.state.settings

    return HealthResponse(
        status="ok",
        version=__version__,
        api_client="configured" if client is not None else "unconfigured",
        webhook_auth=config.webhook_authorization is not None,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
