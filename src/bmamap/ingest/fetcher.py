"""Async HTTP fetch layer for source locations.

Relative locations are resolved against the configured data base URL.
Every request carries a timeout; connection failures are retried by the
transport. Any transport error or non-2xx status becomes a FetchFailure.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx
from loguru import logger

from bmamap.config import settings
from bmamap.errors import FetchFailure

_USER_AGENT = "bmamap/0.1.0"


class SourceFetcher:
    """Fetches raw source bytes over HTTP.

    Use as an async context manager, or call ``aclose()`` when done. A
    client passed in by the caller is left open.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        base = base_url if base_url is not None else settings.data_base_url
        self.base_url = base.rstrip("/") + "/" if base else ""
        self.timeout = timeout if timeout is not None else settings.fetch_timeout
        self.retries = retries if retries is not None else settings.fetch_retries
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=httpx.AsyncHTTPTransport(retries=self.retries),
                timeout=self.timeout,
                headers={"User-Agent": _USER_AGENT},
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def resolve(self, location: str) -> str:
        """Return the absolute URL for a source location."""
        if urlparse(location).scheme in ("http", "https"):
            return location
        return urljoin(self.base_url, location)

    async def fetch(self, location: str, source_id: str = "") -> bytes:
        """Fetch a location and return the response body.

        Raises:
            FetchFailure: On transport error, timeout, invalid URL or non-2xx status.
        """
        url = self.resolve(location)
        try:
            resp = await self._get_client().get(url, timeout=self.timeout)
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Fetch failed for {source_id or url}: {e!r}")
            raise FetchFailure(f"Fetch of {url} failed: {e}", source_id, url) from e
        return resp.content
