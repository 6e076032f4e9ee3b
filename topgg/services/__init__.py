# Services package init
"""
Top.gg Client - Services Layer
==============================

Service Inventory:
    - Transport (abstract): executes one HTTP request
    - HttpxTransport: Transport backed by httpx.AsyncClient
    - TopggClient: one coroutine per Top.gg REST endpoint
"""

from topgg.services.api_client import TopggClient
from topgg.services.transport import HttpxTransport, Transport

__all__ = ["HttpxTransport", "TopggClient", "Transport"]
