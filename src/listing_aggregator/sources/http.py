from __future__ import annotations

import os
import urllib.parse
from typing import Optional

import httpx

from listing_aggregator.errors import SourceUnavailable

from .base import RawBatch, SourceRef
from .payload import parse_records


class HttpSourceProvider:
    """Fetches dataset sources from `<base_url>/<source path>`.

    No retries: a failed source is simply absent from this query's result.
    A client the provider creates itself is bound to the running event loop and
    is dropped by `aclose`; a client passed in is left to its owner.
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        max_bytes: int = 50_000_000,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._client = client
        self._owns_client = client is None
        self._transport = transport

    def url_for(self, source: SourceRef) -> str:
        return urllib.parse.urljoin(self.base_url, urllib.parse.quote(source.path.lstrip("/")))

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        use_no_proxy = (
            os.environ.get("NO_PROXY_LOOKUP") == "1"
            or os.environ.get("CI") == "1"
        )
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            trust_env=not use_no_proxy,
            transport=self._transport,
        )
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, source: SourceRef) -> RawBatch:
        client = await self._ensure_client()
        url = self.url_for(source)
        headers = {
            "User-Agent": "listing-aggregator",
            "Accept": "application/json",
        }
        try:
            response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise SourceUnavailable(source.id, f"request failed: {exc.__class__.__name__}") from exc
        if response.status_code >= 400:
            raise SourceUnavailable(source.id, f"HTTP {response.status_code}")
        records = parse_records(source.id, response.content, self.max_bytes)
        return RawBatch(source=source, records=records)
