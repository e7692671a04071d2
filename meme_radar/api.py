"""HTTP query surface for the dashboard: leaderboard, coin detail, health."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from typing import Any

from aiohttp import web

from meme_radar.core.errors import UpstreamError, ValidationError
from meme_radar.core.models import HealthStatus
from meme_radar.core.utils import isoformat, utcnow
from meme_radar.core.validation import validate_query_params
from meme_radar.trending.discovery import TrendDiscovery

logger = logging.getLogger(__name__)

DISCOVERY_KEY = web.AppKey("discovery", TrendDiscovery)
HEALTH_KEY = web.AppKey("health", Callable[[], Awaitable[HealthStatus]])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
}


def _error(status: int, error: str, message: str) -> web.Response:
    return web.json_response(
        {"error": error, "message": message, "timestamp": isoformat(utcnow())},
        status=status,
    )


@web.middleware
async def cors_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=200)
    else:
        response = await handler(request)
    response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def error_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Map domain errors onto JSON responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ValidationError as exc:
        # Bad query parameters are the caller's fault; bad upstream data is not.
        if exc.field in ("window", "chain", "symbol"):
            return _error(400, "Invalid parameters", str(exc))
        logger.warning("Trend source returned invalid data: %s", exc)
        return _error(502, "Invalid upstream data", str(exc))
    except UpstreamError as exc:
        logger.warning("Trend source failed: %s", exc)
        return _error(502, "Upstream error", str(exc))
    except Exception as exc:
        logger.exception("Unhandled error serving %s", request.path)
        return _error(500, "Internal server error", str(exc) or "Unknown error occurred")


async def handle_discover(request: web.Request) -> web.Response:
    params = validate_query_params(
        request.query.get("window"), request.query.get("chain")
    )
    response = await request.app[DISCOVERY_KEY].discover(params.window, params.chain)
    return web.json_response(response.model_dump(mode="json"))


async def handle_leaderboard(request: web.Request) -> web.Response:
    params = validate_query_params(
        request.query.get("window"), request.query.get("chain")
    )
    body = await request.app[DISCOVERY_KEY].leaderboard(params.window, params.chain)
    return web.json_response(body)


async def handle_coin(request: web.Request) -> web.Response:
    symbol = request.query.get("symbol", "").strip()
    chain = request.query.get("chain", "").strip()
    if not symbol or not chain:
        return _error(
            400,
            "Missing required parameters",
            "Both symbol and chain parameters are required",
        )

    body = await request.app[DISCOVERY_KEY].coin_detail(symbol, chain)
    if body is None:
        return _error(
            404,
            "Coin not found",
            f"No data found for {symbol} on {chain} in any time window",
        )
    return web.json_response(body)


async def handle_health(request: web.Request) -> web.Response:
    status = await request.app[HEALTH_KEY]()
    body: dict[str, Any] = {"status": "ok", **asdict(status)}
    body["uptime_seconds"] = round(status.uptime_seconds, 1)
    return web.json_response(body)


def create_app(
    discovery: TrendDiscovery,
    health: Callable[[], Awaitable[HealthStatus]],
) -> web.Application:
    app = web.Application(middlewares=[cors_middleware, error_middleware])
    app[DISCOVERY_KEY] = discovery
    app[HEALTH_KEY] = health
    app.router.add_get("/api/discover-trends", handle_discover)
    app.router.add_get("/api/leaderboard", handle_leaderboard)
    app.router.add_get("/api/coin", handle_coin)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/", handle_health)
    return app
