"""Send coin alerts to a Discord-style webhook as rich embeds."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from meme_radar.config import DiscordConfig
from meme_radar.core.errors import ConfigurationError, UpstreamError
from meme_radar.core.models import Coin
from meme_radar.core.types import AlertKind, Window
from meme_radar.core.utils import isoformat, truncate, utcnow
from meme_radar.scoring.pre_pump import kol_verified_count

logger = logging.getLogger(__name__)

COLOR_PRE_PUMP = 0xFF4444
COLOR_TRENDING = 0x3B82F6

_SYSTEM_COLORS = {
    "info": 0x3B82F6,
    "warning": 0xF59E0B,
    "error": 0xEF4444,
}
_SYSTEM_ICONS = {
    "info": "ℹ️",
    "warning": "⚠️",
    "error": "❌",
}

_KIND_TITLES = {
    AlertKind.PRE_PUMP: "🚨 PRE-PUMP ALERT",
    AlertKind.TRENDING: "📈 TRENDING",
    AlertKind.ALERT: "🔔 ALERT",
}

MAX_TWEET_LINKS = 3


class DiscordNotifier:
    """Formats coins as embeds and posts them to the configured webhook."""

    def __init__(self, config: DiscordConfig, dry_run: bool = False) -> None:
        if not config.webhook_url and not dry_run:
            raise ConfigurationError(["DISCORD_WEBHOOK_URL is required"])
        self._config = config
        self._dry_run = dry_run
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def send_alert(self, coin: Coin, window: Window, kind: AlertKind) -> None:
        """Post one alert embed. Raises :class:`UpstreamError` on failure."""
        payload = {"embeds": [self.format_alert(coin, window, kind, self._config.footer)]}
        await self._post(payload, label=f"{kind} alert for {coin.symbol}")

    async def send_system_message(self, message: str, level: str = "info") -> None:
        """Post an operator-facing status message (info, warning or error)."""
        embed = {
            "title": f"{_SYSTEM_ICONS.get(level, '')} System {level.capitalize()}".strip(),
            "description": message,
            "color": _SYSTEM_COLORS.get(level, COLOR_TRENDING),
            "footer": {"text": "Twitter Meme Radar System"},
            "timestamp": isoformat(utcnow()),
        }
        await self._post({"embeds": [embed]}, label=f"system {level} message")

    async def _post(self, payload: dict[str, Any], label: str) -> None:
        if self._dry_run:
            logger.info("[DRY-RUN] Would send %s:\n%s", label, json.dumps(payload, indent=2))
            return

        session = await self._get_session()
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        try:
            async with session.post(
                self._config.webhook_url, json=payload, timeout=timeout
            ) as resp:
                if resp.status // 100 != 2:
                    body = await resp.text()
                    logger.error("Webhook error %d: %s", resp.status, truncate(body))
                    raise UpstreamError("webhook", truncate(body), status=resp.status)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UpstreamError("webhook", f"request failed: {exc!r}") from exc

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    @staticmethod
    def format_alert(
        coin: Coin,
        window: Window,
        kind: AlertKind,
        footer: str = "Twitter Meme Radar • Real-time crypto trend detection",
    ) -> dict[str, Any]:
        counts = coin.counts
        baseline = coin.baseline
        tweet_growth = _growth_label(counts.tweet_count, baseline.tweet_count)
        author_growth = _growth_label(counts.unique_authors, baseline.unique_authors)
        influence = kol_verified_count(coin)

        title = f"{_KIND_TITLES[kind]} • ${coin.symbol} ({coin.chain}) • {window}"
        description = (
            f"**Hype Score:** {coin.hype_score * 100:.0f}% | "
            f"**Growth:** Tweets +{tweet_growth}x, Authors +{author_growth}x | "
            f"**Influence:** {influence} KOL+Verified\n\n"
            f"**{coin.reason_short}**"
        )

        fields: list[dict[str, Any]] = [
            {"name": "🏷️ Alert", "value": str(kind), "inline": True},
            {
                "name": "📊 Metrics",
                "value": "\n".join(
                    [
                        f"Tweets: {counts.tweet_count} ({tweet_growth}x)",
                        f"Authors: {counts.unique_authors} ({author_growth}x)",
                        f"KOLs: {counts.kol_count} | Verified: {counts.verified_count}",
                        f"Cashtags: {counts.cashtag_count} | Hashtags: {counts.hashtag_count}",
                        f"New Wallets: {counts.new_wallet_signals}",
                    ]
                ),
                "inline": True,
            },
            {
                "name": "🎯 Baseline Comparison",
                "value": "\n".join(
                    [
                        f"Base Tweets: {baseline.tweet_count}",
                        f"Base Authors: {baseline.unique_authors}",
                        f"Base KOLs: {baseline.kol_count}",
                        f"Base Verified: {baseline.verified_count}",
                    ]
                ),
                "inline": True,
            },
        ]

        sources = " • ".join(
            f"[{tweet.author_handle}]({tweet.url})"
            for tweet in coin.top_tweets[:MAX_TWEET_LINKS]
        )
        if sources:
            fields.append({"name": "🔗 Top Sources", "value": sources, "inline": False})

        if coin.contract_address:
            fields.append(
                {
                    "name": "📝 Contract",
                    "value": f"`{coin.contract_address}`",
                    "inline": False,
                }
            )

        return {
            "title": title,
            "description": description,
            "color": COLOR_PRE_PUMP if kind is AlertKind.PRE_PUMP else COLOR_TRENDING,
            "fields": fields,
            "footer": {"text": footer},
            "timestamp": isoformat(utcnow()),
        }


def _growth_label(current: int, base: int) -> str:
    if base <= 0:
        return "N/A"
    return f"{current / base:.1f}"
