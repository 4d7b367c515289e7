"""
HTTP connection handling for the tracker API.

One pool is created per invocation and closed when the provider disconnects;
nothing is shared between runs.
"""

import asyncio
from typing import Any

import httpx
import structlog

from asana_pr_sync.exceptions import ExternalServiceError

log = structlog.get_logger(__name__)


class HTTPConnectionPool:
    """HTTP connection pool for API requests."""

    def __init__(
        self,
        base_url: str,
        max_connections: int = 10,
        max_keepalive_connections: int = 5,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url
        self.max_connections = max_connections
        self.max_keepalive_connections = max_keepalive_connections
        self.timeout = timeout
        self.headers = headers or {}
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the connection pool."""
        async with self._lock:
            if self._client is None:
                limits = httpx.Limits(
                    max_keepalive_connections=self.max_keepalive_connections,
                    max_connections=self.max_connections,
                    keepalive_expiry=30.0,
                )

                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    limits=limits,
                    timeout=self.timeout,
                    http2=True,
                    headers=self.headers,
                )

                log.info(
                    "connection_pool_initialized",
                    base_url=self.base_url,
                    max_connections=self.max_connections,
                )

    async def close(self) -> None:
        """Close the connection pool."""
        async with self._lock:
            if self._client:
                await self._client.aclose()
                self._client = None
                log.info("connection_pool_closed", base_url=self.base_url)

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise ExternalServiceError unless it succeeded.

        Raises:
            ExternalServiceError: On connection failures, timeouts and
                non-2xx responses.
        """
        if self._client is None:
            await self.initialize()

        assert self._client is not None
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                f"{method} {path} failed",
                status_code=e.response.status_code,
                response_text=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"{method} {path} failed: {e}") from e

        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make GET request."""
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make POST request."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make PUT request."""
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make DELETE request."""
        return await self.request("DELETE", path, **kwargs)

    async def __aenter__(self) -> "HTTPConnectionPool":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()
