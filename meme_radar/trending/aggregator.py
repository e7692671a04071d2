"""Merge per-window observations of the same coins."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence

import aiohttp

from meme_radar.core.errors import MemeRadarError
from meme_radar.core.models import (
    Coin,
    CoinDetail,
    SparklinePoint,
    TrendResponse,
    WindowedCoin,
    WindowResult,
)
from meme_radar.core.types import Window

logger = logging.getLogger(__name__)

WindowFetcher = Callable[[Window], Awaitable[TrendResponse]]


async def _fetch_one(
    fetch: WindowFetcher,
    window: Window,
    timeout: float | None,
) -> WindowResult:
    try:
        response = await asyncio.wait_for(fetch(window), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Fetch for %s window timed out after %ss", window, timeout)
        return WindowResult(window=window, error=f"timed out after {timeout}s")
    except (MemeRadarError, aiohttp.ClientError) as exc:
        logger.warning("Fetch for %s window failed: %s", window, exc)
        return WindowResult(window=window, error=str(exc))
    except Exception as exc:
        logger.exception("Unexpected error fetching %s window", window)
        return WindowResult(window=window, error=f"unexpected error: {exc!r}")
    return WindowResult(window=window, response=response)


async def gather_windows(
    fetch: WindowFetcher,
    windows: Iterable[Window],
    timeout: float | None = None,
) -> list[WindowResult]:
    """Fetch every window concurrently; a failed window never fails the batch.

    Results come back in the order *windows* was given.
    """
    windows = list(windows)
    results = await asyncio.gather(
        *(_fetch_one(fetch, window, timeout) for window in windows)
    )
    failed = [str(r.window) for r in results if not r.ok]
    if failed:
        logger.info(
            "Gathered %d/%d windows (failed: %s)",
            len(results) - len(failed),
            len(results),
            ", ".join(failed),
        )
    return list(results)


def collect_coins(results: Iterable[WindowResult]) -> list[WindowedCoin]:
    """Flatten successful windows into ``(coin, window)`` observations."""
    observations: list[WindowedCoin] = []
    for result in results:
        if result.response is None:
            continue
        observations.extend(
            WindowedCoin(coin=coin, window=result.window)
            for coin in result.response.coins
        )
    return observations


def dedupe_coins(observations: Iterable[WindowedCoin]) -> list[WindowedCoin]:
    """Keep one observation per ``(symbol, chain)``, case-insensitively.

    A later observation replaces the kept one only with a strictly higher
    ``hype_score``; on a tie the first seen wins. Each identity keeps the
    position where it was first seen.
    """
    best: dict[tuple[str, str], WindowedCoin] = {}
    for obs in observations:
        current = best.get(obs.identity)
        if current is None or obs.coin.hype_score > current.coin.hype_score:
            best[obs.identity] = obs
    return list(best.values())


def _matches(coin: Coin, symbol: str, chain: str) -> bool:
    return coin.symbol.lower() == symbol.lower() and coin.chain.lower() == chain.lower()


def build_coin_detail(
    symbol: str,
    chain: str,
    results: Sequence[WindowResult],
) -> CoinDetail | None:
    """Multi-window view of one coin, or ``None`` if no window has it.

    Identity fields are hoisted out of the per-window records and taken from
    the shortest window that saw the coin. Windows that failed to fetch are
    simply absent.
    """
    found: list[tuple[Window, Coin, str]] = []
    for result in sorted(results, key=lambda r: r.window.rank):
        if result.response is None:
            continue
        coin = next(
            (c for c in result.response.coins if _matches(c, symbol, chain)),
            None,
        )
        if coin is not None:
            found.append((result.window, coin, result.response.generated_at_iso))

    if not found:
        return None

    base = found[0][1]
    return CoinDetail(
        symbol=base.symbol,
        chain=base.chain,
        name=base.name,
        contract_address=base.contract_address,
        windows={window: coin.window_fields() for window, coin, _ in found},
        hype_sparkline=[
            SparklinePoint(window=window, hype_score=coin.hype_score, timestamp=stamp)
            for window, coin, stamp in found
        ],
    )
