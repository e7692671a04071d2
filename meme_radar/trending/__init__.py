"""Trend discovery and multi-window aggregation."""

from meme_radar.trending.aggregator import (
    build_coin_detail,
    collect_coins,
    dedupe_coins,
    gather_windows,
)
from meme_radar.trending.discovery import TrendDiscovery

__all__ = [
    "TrendDiscovery",
    "build_coin_detail",
    "collect_coins",
    "dedupe_coins",
    "gather_windows",
]
