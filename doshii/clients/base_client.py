"""
HTTP transport for the Doshii partner API.

This module provides the default request executor used by the resource
clients: session management, credential headers, query encoding and
mapping of HTTP failures to DoshiiAPIException. Requests are sent once;
retrying is left to the caller.
"""

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import aiohttp
from aiohttp import ClientTimeout

from doshii.core.config import Settings, get_settings
from doshii.core.logging_config import log_api_call
from doshii.domain.models.order import RequestConfig
from doshii.utils.error_handler import DoshiiAPIException, ErrorCode, log_error

logger = logging.getLogger(__name__)


def encode_query_params(params: Optional[Dict[str, Any]]) -> List[Tuple[str, str]]:
    """
    Flatten query parameters into the pairs aiohttp sends.

    Lists become repeated keys, enums their value, booleans ``true``/``false``
    and None values are dropped.

    Args:
        params: Query parameters from a RequestConfig

    Returns:
        List of (name, value) string pairs
    """
    if not params:
        return []

    def _encode(value: Any) -> str:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set)):
            pairs.extend((key, _encode(item)) for item in value if item is not None)
        else:
            pairs.append((key, _encode(value)))
    return pairs


class DoshiiHTTPClient:
    """
    Executes RequestConfig descriptors against the Doshii API.

    An initialised instance is itself the executor: pass it to OrderClient
    and every call becomes one HTTP request.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
    ):
        """
        Initialise the transport.

        Args:
            settings: Settings to use, defaults to the cached environment settings
            base_url: Overrides the base URL derived from settings
            access_token: Overrides DOSHII_ACCESS_TOKEN
        """
        self.settings = settings or get_settings()
        self.base_url = (base_url or self.settings.api_base_url).rstrip("/")

        self.default_headers = self.settings.get_default_headers()
        if access_token:
            self.default_headers["Authorization"] = f"Bearer {access_token}"

        self.session: Optional[aiohttp.ClientSession] = None

        logger.info(f"Initialized Doshii HTTP client for {self.base_url}")

    async def initialize(self):
        """
        Create the HTTP session.
        """
        if self.session is not None:
            return

        timeout = ClientTimeout(
            total=self.settings.DOSHII_REQUEST_TIMEOUT,
            connect=self.settings.DOSHII_CONNECT_TIMEOUT,
        )
        connector = aiohttp.TCPConnector(
            limit=self.settings.DOSHII_MAX_CONNECTIONS,
            limit_per_host=self.settings.DOSHII_MAX_CONNECTIONS_PER_HOST,
        )
        self.session = aiohttp.ClientSession(timeout=timeout, connector=connector)
        logger.info("Doshii HTTP session opened")

    async def close(self):
        """Close the HTTP session and clean up resources."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info("Doshii HTTP session closed")

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def __call__(self, request: RequestConfig) -> Any:
        return await self.execute(request)

    async def execute(self, request: RequestConfig) -> Any:
        """
        Send one request to Doshii.

        Args:
            request: Request descriptor built by a resource client

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            DoshiiAPIException: If the client is not initialised, the request
                fails at the network level or Doshii answers with a non-2xx status
        """
        method = request["method"].upper()
        path = request["url"]

        if not self.session:
            raise DoshiiAPIException(
                "Client not initialized. Call initialize() first.",
                method=method,
                endpoint=path,
                error_code=ErrorCode.CLIENT_NOT_INITIALIZED,
            )

        headers = {**self.default_headers, **(request.get("headers") or {})}
        kwargs: Dict[str, Any] = {"headers": headers}

        params = encode_query_params(request.get("params"))
        if params:
            kwargs["params"] = params

        data = request.get("data")
        if data is not None:
            kwargs["json"] = data

        start_time = time.monotonic()
        try:
            async with self.session.request(method, self._build_url(path), **kwargs) as response:
                body = self._decode_body(await response.text())
                duration = time.monotonic() - start_time
                log_api_call(method, path, response.status, duration)

                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    raise DoshiiAPIException(
                        f"Rate limit exceeded on {method} {path}",
                        api_response_code=429,
                        method=method,
                        endpoint=path,
                        response_body=body,
                        rate_limited=True,
                        retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                    )

                if not 200 <= response.status < 300:
                    raise DoshiiAPIException(
                        f"HTTP {response.status} on {method} {path}: {self._error_message(body)}",
                        api_response_code=response.status,
                        method=method,
                        endpoint=path,
                        response_body=body,
                    )

                return body

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            error = DoshiiAPIException(
                f"Network error on {method} {path}: {str(e) or type(e).__name__}",
                method=method,
                endpoint=path,
            )
            log_error(error, {"base_url": self.base_url})
            raise error from e

    def _build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _decode_body(text: str) -> Any:
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    @staticmethod
    def _error_message(body: Any) -> str:
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body) if body else "Unknown error"

    def __repr__(self):
        return f"DoshiiHTTPClient(base_url='{self.base_url}', initialized={self.session is not None})"
