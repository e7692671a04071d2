"""Unit tests for trend discovery, leaderboard and coin detail views."""

from __future__ import annotations

import pytest

from factories import (
    PRE_PUMP_BASELINE,
    PRE_PUMP_COUNTS,
    FakeSource,
    coin_dict,
    response_dict,
)
from meme_radar.core.errors import UpstreamError, ValidationError
from meme_radar.core.types import ChainFilter, Window
from meme_radar.trending.discovery import TrendDiscovery

# Rescored: 0.03 growth + 0.2 kol
KOL_HEAVY = {"kol_count": 10}
# Rescored: 0.3 growth + 0.2 kol + 0.1 verified + 0.1 cashtag + 0.1 grok
HOT = {"tweet_count": 100, "kol_count": 10, "verified_count": 20, "cashtag_count": 50}


def _documents() -> dict[Window, object]:
    return {
        Window.M5: response_dict(
            [
                coin_dict("LOW", "SOL", hype_score=0.99),
                coin_dict("HOT", "ETH", counts=HOT, grok_hype=1.0),
                coin_dict("MID", "sol", counts=KOL_HEAVY),
            ]
        ),
    }


class TestDiscover:
    @pytest.mark.asyncio
    async def test_rescores_and_sorts(self) -> None:
        discovery = TrendDiscovery(FakeSource(_documents()))
        response = await discovery.discover(Window.M5)

        assert [c.symbol for c in response.coins] == ["HOT", "MID", "LOW"]
        scores = {c.symbol: c.hype_score for c in response.coins}
        assert scores["HOT"] == pytest.approx(0.8)
        assert scores["MID"] == pytest.approx(0.23)
        # Upstream claimed 0.99; recomputed value wins.
        assert scores["LOW"] == pytest.approx(0.03)

    @pytest.mark.asyncio
    async def test_chain_filter_is_case_insensitive(self) -> None:
        discovery = TrendDiscovery(FakeSource(_documents()))
        response = await discovery.discover(Window.M5, ChainFilter.SOL)
        assert [c.symbol for c in response.coins] == ["MID", "LOW"]

    @pytest.mark.asyncio
    async def test_empty_snapshot_passes_through(self) -> None:
        discovery = TrendDiscovery(FakeSource({Window.H1: response_dict([], "1h")}))
        response = await discovery.discover(Window.H1)
        assert response.coins == []
        assert response.window_used is Window.H1

    @pytest.mark.asyncio
    async def test_invalid_snapshot_raises(self) -> None:
        discovery = TrendDiscovery(FakeSource({Window.M5: {"coins": []}}))
        with pytest.raises(ValidationError):
            await discovery.discover(Window.M5)

    @pytest.mark.asyncio
    async def test_upstream_failure_raises(self) -> None:
        discovery = TrendDiscovery(FakeSource({}))
        with pytest.raises(UpstreamError):
            await discovery.discover(Window.M5)

    @pytest.mark.asyncio
    async def test_discover_windows_isolates_failures(self) -> None:
        source = FakeSource(_documents())
        discovery = TrendDiscovery(source)
        results = await discovery.discover_windows([Window.M1, Window.M5])
        assert [r.ok for r in results] == [False, True]
        assert {w for w, _ in source.calls} == {Window.M1, Window.M5}

    @pytest.mark.asyncio
    async def test_discover_windows_survives_unexpected_errors(self) -> None:
        documents = _documents()
        documents[Window.M1] = RuntimeError("bug")
        documents[Window.M15] = response_dict([], "15m")
        discovery = TrendDiscovery(FakeSource(documents))

        results = await discovery.discover_windows([Window.M1, Window.M5, Window.M15])

        assert [r.ok for r in results] == [False, True, True]


class TestLeaderboard:
    @pytest.mark.asyncio
    async def test_metadata(self) -> None:
        documents = _documents()
        documents[Window.M5]["coins"].append(
            coin_dict("PUMP", "BSC", counts=PRE_PUMP_COUNTS, baseline=PRE_PUMP_BASELINE)
        )
        discovery = TrendDiscovery(FakeSource(documents))

        body = await discovery.leaderboard(Window.M5, ChainFilter.ALL)

        meta = body["metadata"]
        assert meta["total_coins"] == 4
        assert meta["window"] == "5m"
        assert meta["chain_filter"] == "ALL"
        assert meta["pre_pump_count"] == 1
        assert meta["high_hype_count"] == 1
        assert body["window_used"] == "5m"
        assert body["coins"][0]["symbol"] == "HOT"


class TestCoinDetail:
    @pytest.mark.asyncio
    async def test_aggregates_across_windows(self) -> None:
        documents = {
            Window.M1: response_dict([coin_dict("MID", "SOL")], "1m"),
            Window.M5: _documents()[Window.M5],
            Window.H4: response_dict(
                [coin_dict("MID", "SOL", counts=PRE_PUMP_COUNTS, baseline=PRE_PUMP_BASELINE)],
                "4h",
            ),
        }
        discovery = TrendDiscovery(FakeSource(documents))

        body = await discovery.coin_detail("mid", "SOL")

        assert body is not None
        assert [p["window"] for p in body["hype_sparkline"]] == ["1m", "5m", "4h"]
        assert set(body["windows"]) == {"1m", "5m", "4h"}
        meta = body["metadata"]
        assert meta["windows_available"] == 3
        assert meta["is_pre_pump"] is True
        assert meta["highest_hype_score"] >= meta["average_hype_score"] >= meta["lowest_hype_score"]

    @pytest.mark.asyncio
    async def test_unknown_coin(self) -> None:
        discovery = TrendDiscovery(FakeSource(_documents()))
        assert await discovery.coin_detail("NOPE", "SOL") is None
