"""Trend snapshots from a remote discover-trends endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from meme_radar.core.errors import UpstreamError
from meme_radar.core.types import ChainFilter, Window
from meme_radar.core.utils import truncate
from meme_radar.sources.base_source import BaseTrendSource

logger = logging.getLogger(__name__)


class HttpTrendSource(BaseTrendSource):
    """``GET <url>?window=..&chain=..`` returning the trend snapshot JSON."""

    name = "discover-trends"

    def __init__(self, url: str, timeout_seconds: float = 90.0) -> None:
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch(
        self,
        window: Window,
        chain: ChainFilter = ChainFilter.ALL,
    ) -> Any:
        session = await self._get_session()
        params = {"window": str(window), "chain": str(chain)}
        try:
            async with session.get(
                self._url, params=params, timeout=self._timeout
            ) as resp:
                if resp.status // 100 != 2:
                    body = await resp.text()
                    raise UpstreamError(self.name, truncate(body), status=resp.status)
                try:
                    return await resp.json(content_type=None)
                except (ValueError, RecursionError):
                    raise UpstreamError(self.name, "response is not JSON") from None
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UpstreamError(self.name, f"request failed: {exc!r}") from exc
