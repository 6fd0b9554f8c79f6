"""Fetch primitive: HTTP GET returning raw bytes or raising TransportError."""

from __future__ import annotations

import logging
from typing import Protocol
from typing import runtime_checkable

import httpx

from .errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@runtime_checkable
class Transport(Protocol):
    """Anything that can GET a URL asynchronously."""

    async def fetch(self, url: str) -> bytes: ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """Transport backed by a shared ``httpx.AsyncClient``.

    Only a 200 response counts as success; any other status, and any
    ``httpx.HTTPError``, is reported as TransportError.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_TIMEOUT):
        """Initialize transport.

        Args:
            client: Client to use. If None, one is created and owned by this transport.
            timeout: Request timeout in seconds for an owned client
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def fetch(self, url: str) -> bytes:
        logger.debug(f"GET {url}")
        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(url, f"Could not make request to {url}: {e}") from e

        if response.status_code != httpx.codes.OK:
            logger.error(f"Request to {url} returned HTTP {response.status_code}")
            raise TransportError(
                url,
                f"Could not make request to {url}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
