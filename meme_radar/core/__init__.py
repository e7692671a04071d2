"""Core models, types, and utilities."""

from meme_radar.core.errors import (
    ConfigurationError,
    MemeRadarError,
    UpstreamError,
    ValidationError,
)
from meme_radar.core.models import (
    Baseline,
    Coin,
    CoinDetail,
    Counts,
    Tweet,
    TrendResponse,
    WindowedCoin,
    WindowResult,
)
from meme_radar.core.types import AlertKind, ChainFilter, Window

__all__ = [
    "AlertKind",
    "Baseline",
    "ChainFilter",
    "Coin",
    "CoinDetail",
    "ConfigurationError",
    "Counts",
    "MemeRadarError",
    "Tweet",
    "TrendResponse",
    "UpstreamError",
    "ValidationError",
    "Window",
    "WindowedCoin",
    "WindowResult",
]
