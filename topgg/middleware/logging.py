"""
Top.gg Client - Access Log Middleware
=====================================

What:  One log line per HTTP request served by the receiver app.
How:   Times the downstream call and logs method, path, status and duration
       at a level chosen from the status code.
Who:   Added to the receiver app by ``create_app``.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, client IP
    ❌ Don't log: request body (vote payloads), the authorization header
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("topgg.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request once its response is ready.

    5xx → ERROR, 4xx → WARNING, everything else → INFO.
    Health checks are not logged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms from %s",
            method,
            path,
            status,
            duration_ms,
            client_ip,
            extra={
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
