"""Tests for the dashboard HTTP endpoints."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import test_utils

from factories import FakeSource, coin_dict, response_dict
from meme_radar.api import create_app
from meme_radar.core.models import HealthStatus
from meme_radar.core.types import Window
from meme_radar.trending.discovery import TrendDiscovery

DOCUMENTS: dict[Window, Any] = {
    Window.M5: response_dict(
        [
            coin_dict("FOO", "SOL", counts={"kol_count": 10}),
            coin_dict("BAR", "ETH"),
        ]
    ),
    Window.H1: response_dict([coin_dict("FOO", "SOL")], "1h"),
    Window.H4: {"coins": []},
}


async def _health() -> HealthStatus:
    return HealthStatus(uptime_seconds=12.345, cycles_run=3, source="fake")


@pytest_asyncio.fixture
async def client() -> AsyncIterator[test_utils.TestClient]:
    app = create_app(TrendDiscovery(FakeSource(DOCUMENTS)), _health)
    async with test_utils.TestClient(test_utils.TestServer(app)) as c:
        yield c


class TestLeaderboard:
    @pytest.mark.asyncio
    async def test_defaults_to_five_minutes(
        self, client: test_utils.TestClient
    ) -> None:
        resp = await client.get("/api/leaderboard")
        assert resp.status == 200
        body = await resp.json()
        assert body["window_used"] == "5m"
        assert [c["symbol"] for c in body["coins"]] == ["FOO", "BAR"]
        assert body["metadata"]["total_coins"] == 2
        assert body["metadata"]["chain_filter"] == "ALL"

    @pytest.mark.asyncio
    async def test_chain_filter(self, client: test_utils.TestClient) -> None:
        resp = await client.get("/api/leaderboard", params={"chain": "eth"})
        body = await resp.json()
        assert [c["symbol"] for c in body["coins"]] == ["BAR"]
        assert body["metadata"]["chain_filter"] == "ETH"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{"window": "2h"}, {"chain": "DOGE"}])
    async def test_bad_params_are_400(
        self, client: test_utils.TestClient, params: dict[str, str]
    ) -> None:
        resp = await client.get("/api/leaderboard", params=params)
        assert resp.status == 400
        body = await resp.json()
        assert body["error"] == "Invalid parameters"
        assert body["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_upstream_failure_is_502(
        self, client: test_utils.TestClient
    ) -> None:
        resp = await client.get("/api/leaderboard", params={"window": "15m"})
        assert resp.status == 502
        assert (await resp.json())["error"] == "Upstream error"

    @pytest.mark.asyncio
    async def test_invalid_upstream_data_is_502(
        self, client: test_utils.TestClient
    ) -> None:
        resp = await client.get("/api/leaderboard", params={"window": "4h"})
        assert resp.status == 502
        assert (await resp.json())["error"] == "Invalid upstream data"


class TestDiscover:
    @pytest.mark.asyncio
    async def test_returns_snapshot(self, client: test_utils.TestClient) -> None:
        resp = await client.get("/api/discover-trends", params={"window": "1h"})
        assert resp.status == 200
        body = await resp.json()
        assert body["window_used"] == "1h"
        assert "metadata" not in body


class TestCoin:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params", [{}, {"symbol": "FOO"}, {"chain": "SOL"}, {"symbol": " ", "chain": "SOL"}]
    )
    async def test_missing_params_are_400(
        self, client: test_utils.TestClient, params: dict[str, str]
    ) -> None:
        resp = await client.get("/api/coin", params=params)
        assert resp.status == 400
        assert (await resp.json())["error"] == "Missing required parameters"

    @pytest.mark.asyncio
    async def test_unknown_coin_is_404(self, client: test_utils.TestClient) -> None:
        resp = await client.get("/api/coin", params={"symbol": "NOPE", "chain": "SOL"})
        assert resp.status == 404
        body = await resp.json()
        assert body["error"] == "Coin not found"
        assert "NOPE" in body["message"]

    @pytest.mark.asyncio
    async def test_found_across_windows(self, client: test_utils.TestClient) -> None:
        resp = await client.get("/api/coin", params={"symbol": "foo", "chain": "sol"})
        assert resp.status == 200
        body = await resp.json()
        assert set(body["windows"]) == {"5m", "1h"}
        assert body["metadata"]["windows_available"] == 2


class TestHealthAndCors:
    @pytest.mark.asyncio
    async def test_health(self, client: test_utils.TestClient) -> None:
        resp = await client.get("/health")
        assert resp.status == 200
        body = await resp.json()
        assert body["status"] == "ok"
        assert body["uptime_seconds"] == 12.3
        assert body["cycles_run"] == 3
        assert body["source"] == "fake"

    @pytest.mark.asyncio
    async def test_preflight(self, client: test_utils.TestClient) -> None:
        resp = await client.options("/api/leaderboard")
        assert resp.status == 200
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "GET" in resp.headers["Access-Control-Allow-Methods"]

    @pytest.mark.asyncio
    async def test_cors_on_errors(self, client: test_utils.TestClient) -> None:
        resp = await client.get("/api/coin")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
