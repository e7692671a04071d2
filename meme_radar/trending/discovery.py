"""Trend discovery: validate, rescore and rank snapshots from a trend source."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from meme_radar.core.models import TrendResponse, WindowResult
from meme_radar.core.types import ChainFilter, Window
from meme_radar.core.utils import isoformat, utcnow
from meme_radar.core.validation import validate_trend_response
from meme_radar.scoring.hype import rescore_all
from meme_radar.scoring.pre_pump import is_pre_pump
from meme_radar.sources.base_source import BaseTrendSource
from meme_radar.trending.aggregator import build_coin_detail, gather_windows

logger = logging.getLogger(__name__)

HIGH_HYPE_SCORE = 0.7
TRENDING_SCORE = 0.5


class TrendDiscovery:
    """Turns raw source snapshots into ranked, rescored coin lists.

    Pipeline per window:
        fetch -> validate -> rescore -> sort by hype_score desc -> chain filter

    The source's own ``hype_score`` values never survive this pipeline.
    """

    def __init__(
        self,
        source: BaseTrendSource,
        fetch_timeout: float | None = None,
    ) -> None:
        self._source = source
        self._timeout = fetch_timeout

    @property
    def source_name(self) -> str:
        return self._source.name

    async def discover(
        self,
        window: Window = Window.M5,
        chain: ChainFilter = ChainFilter.ALL,
    ) -> TrendResponse:
        """Return the validated, rescored snapshot for *window*.

        Raises ``UpstreamError`` or ``ValidationError`` for this window only.
        """
        raw = await self._source.fetch(window, chain)
        response = validate_trend_response(raw)

        if not response.coins:
            logger.info("No trending coins for %s window", window)
            return response

        coins = rescore_all(response.coins)
        coins.sort(key=lambda c: c.hype_score, reverse=True)

        if chain != ChainFilter.ALL:
            coins = [c for c in coins if c.chain.upper() == str(chain).upper()]

        logger.info("Found %d trending coins for %s window", len(coins), window)
        return response.model_copy(update={"coins": coins})

    async def discover_windows(
        self,
        windows: Iterable[Window],
        chain: ChainFilter = ChainFilter.ALL,
    ) -> list[WindowResult]:
        """Discover several windows concurrently, isolating failures."""

        async def fetch(window: Window) -> TrendResponse:
            return await self.discover(window, chain)

        return await gather_windows(fetch, windows, timeout=self._timeout)

    # ------------------------------------------------------------------
    # Dashboard views
    # ------------------------------------------------------------------

    async def leaderboard(
        self,
        window: Window = Window.M5,
        chain: ChainFilter = ChainFilter.ALL,
    ) -> dict[str, Any]:
        response = await self.discover(window, chain)
        coins = response.coins
        body = response.model_dump(mode="json")
        body["metadata"] = {
            "total_coins": len(coins),
            "window": str(window),
            "chain_filter": str(chain),
            "last_updated": isoformat(utcnow()),
            "pre_pump_count": sum(1 for c in coins if is_pre_pump(c)),
            "high_hype_count": sum(1 for c in coins if c.hype_score >= HIGH_HYPE_SCORE),
        }
        logger.info(
            "Leaderboard: %d coins, %d pre-pump",
            body["metadata"]["total_coins"],
            body["metadata"]["pre_pump_count"],
        )
        return body

    async def coin_detail(self, symbol: str, chain: str) -> dict[str, Any] | None:
        """Multi-window view of one coin across every window, or ``None``."""
        results = await self.discover_windows(Window.ordered())
        detail = build_coin_detail(symbol, chain, results)
        if detail is None:
            return None

        scores = [point.hype_score for point in detail.hype_sparkline]
        pre_pump = any(
            is_pre_pump(coin)
            for result in results
            if result.response is not None
            for coin in result.response.coins
            if coin.identity == (symbol.upper(), chain.upper())
        )
        body = detail.model_dump(mode="json")
        body["metadata"] = {
            "windows_available": len(detail.windows),
            "highest_hype_score": max(scores),
            "lowest_hype_score": min(scores),
            "average_hype_score": sum(scores) / len(scores),
            "last_updated": isoformat(utcnow()),
            "is_trending": any(s >= TRENDING_SCORE for s in scores),
            "is_pre_pump": pre_pump,
        }
        logger.info(
            "Coin detail for %s: %d windows, max hype %.2f",
            symbol,
            len(detail.windows),
            body["metadata"]["highest_hype_score"],
        )
        return body
