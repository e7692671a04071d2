"""Trend-discovery backends."""

from meme_radar.sources.base_source import BaseTrendSource
from meme_radar.sources.grok_source import GrokTrendSource
from meme_radar.sources.http_source import HttpTrendSource

__all__ = ["BaseTrendSource", "GrokTrendSource", "HttpTrendSource"]
