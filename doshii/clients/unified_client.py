"""
Unified Doshii client that wires the resource clients to one transport.
"""

import logging
from typing import Optional

from doshii.core.config import Settings

from .base_client import DoshiiHTTPClient
from .order_client import OrderClient

logger = logging.getLogger(__name__)


class DoshiiClient:
    """
    Single entry point for the Doshii API.

    Owns the HTTP transport and exposes the resource clients built on it:

        async with DoshiiClient() as doshii:
            orders = await doshii.orders.get(location_id)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        http_client: Optional[DoshiiHTTPClient] = None,
    ):
        self.http = http_client or DoshiiHTTPClient(settings=settings, base_url=base_url, access_token=access_token)
        self.orders = OrderClient(self.http)

    async def initialize(self):
        await self.http.initialize()
        logger.info("Doshii client initialized")

    async def close(self):
        await self.http.close()

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self):
        return f"DoshiiClient(http={self.http!r})"
