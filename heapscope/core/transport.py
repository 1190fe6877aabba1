"""HttpTransport: fetches one protocol response over httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..types import TransportError

logger = logging.getLogger(__name__)


class HttpTransport:
    """GETs relative URLs against a heap server and decodes the JSON body.

    No retries. Every channel-level failure (connection error, non-2xx
    status, body that is not JSON) becomes a ``TransportError``.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:7070",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=httpx.Timeout(timeout),
        )

    async def fetch(self, url: str) -> Any:
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e}", url=url) from e

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code}: {response.text}",
                url=url,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Response body is not JSON: {e}",
                url=url,
                status_code=response.status_code,
            ) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
