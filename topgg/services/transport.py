"""
Top.gg Client - HTTP Transport Boundary
=======================================

What:  Abstract interface that executes one HTTP request, plus the default
       implementation built on ``httpx.AsyncClient``.
How:   ``execute(method, url, headers, body)`` returns ``(status, text)`` for
       any response, whatever its status, and raises ``TransportError`` when no
       response arrives.
Who:   Called by TopggClient for every request.

Connection pooling, keep-alive, TLS and HTTP/2 are entirely the transport's
business. Swap in another implementation (a recording stub, a different HTTP
library) by subclassing ``Transport``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import httpx

from topgg.config import settings
from topgg.exceptions import TransportError

logger = logging.getLogger(__name__)


class Transport(ABC):
    """
    Contract for executing a single HTTP exchange.

    Implementations must:
        - return the status code and the decoded text body for every response,
          including 4xx and 5xx
        - raise TransportError (never a library-specific exception) when the
          request fails before a response is received
        - never retry
    """

    @abstractmethod
    async def execute(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> Tuple[int, str]:
        """
        Send one request.

        Args:
            method:   Upper-case HTTP method ("GET", "POST", ...)
            url:      Absolute URL, query string already attached
            headers:  Request headers
            body:     Encoded request payload, or None for no payload

        Returns:
            (status_code, response_text)

        Raises:
            TransportError: No response was received.
        """
        ...

    async def aclose(self) -> None:
        """Release any pooled connections. The default holds none."""
        return None


class HttpxTransport(Transport):
    """
    Transport backed by ``httpx.AsyncClient``.

    Pass an existing client to share its connection pool with the rest of the
    application; the caller then stays responsible for closing it. Without
    one, a client is created with ``settings.request_timeout`` and closed by
    ``aclose()``.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.request_timeout,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def execute(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> Tuple[int, str]:
        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                content=body.encode("utf-8") if body is not None else None,
            )
        except httpx.TransportError as e:
            # str() of some httpx errors is empty (e.g. bare timeouts)
            reason = str(e) or type(e).__name__
            logger.warning("%s %s failed without a response: %s", method, url, reason)
            raise TransportError(
                reason=reason,
                context={"method": method, "error_type": type(e).__name__},
            ) from e

        return response.status_code, response.text

    async def aclose(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()
