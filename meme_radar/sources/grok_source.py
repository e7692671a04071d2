"""Trend snapshots straight from the Grok chat-completions API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from meme_radar.config import GrokConfig
from meme_radar.core.errors import ConfigurationError, UpstreamError
from meme_radar.core.types import ChainFilter, Window
from meme_radar.core.utils import isoformat, truncate, utcnow
from meme_radar.sources.base_source import BaseTrendSource

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a crypto meme-coin trend hunter for X.com. "
    "Output valid JSON only matching schema. No prose."
)


def build_user_prompt(window: Window, generated_at: str | None = None) -> str:
    """Window-specific instructions for the model."""
    stamp = generated_at or isoformat(utcnow())
    return (
        f"Find trending meme coins on X in the last {window}.\n"
        "Chains: SOL, ETH, BSC. English only.\n"
        "Extract: tweet_count, unique_authors, verified_count, kol_count, "
        "cashtag_count, hashtag_count, new_wallet_signals.\n"
        "Return 1–3 top tweet URLs + authors with flags.\n"
        "Disambiguate tokens (cashtags/contracts).\n"
        "Exclude spam/bots.\n"
        f"Add baseline: if {window} ∈ {{1m,5m,15m}} → prev window; "
        "if {1h,4h,24h} → avg_24h.\n"
        "Compute hype_score 0..1 using:\n"
        "0.30*vol_growth + 0.20*kol + 0.10*verified + 0.10*cashtag + "
        "0.10*hashtag + 0.10*wallet + 0.10*grok_hype.\n"
        "Reason_short ≤18 words.\n"
        "Pre-pump (we compute): tweet_count ≥3x baseline, authors ≥2x "
        "baseline, KOL+verified ≥5.\n"
        "Output JSON only. If no coins pass ≥5 tweets & 3 authors, return "
        f'{{"coins":[],"window_used":"{window}","generated_at_iso":"{stamp}"}}.'
    )


class GrokTrendSource(BaseTrendSource):
    """Asks the language model for a structured snapshot of trending coins."""

    name = "grok"

    def __init__(self, config: GrokConfig) -> None:
        if not config.api_key:
            raise ConfigurationError(["GROK_API_KEY is required"])
        self._config = config
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    def build_request(self, window: Window) -> dict[str, Any]:
        return {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(window)},
            ],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
            "response_format": {"type": "json_object"},
        }

    async def fetch(
        self,
        window: Window,
        chain: ChainFilter = ChainFilter.ALL,
    ) -> Any:
        # The model is always asked for every chain; filtering happens after scoring.
        session = await self._get_session()
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)

        try:
            async with session.post(
                self._config.api_url,
                json=self.build_request(window),
                headers=headers,
                timeout=timeout,
            ) as resp:
                if resp.status // 100 != 2:
                    body = await resp.text()
                    raise UpstreamError(self.name, truncate(body), status=resp.status)
                try:
                    data = await resp.json(content_type=None)
                except (ValueError, RecursionError):
                    raise UpstreamError(self.name, "response is not JSON") from None
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UpstreamError(self.name, f"request failed: {exc!r}") from exc

        return self._extract_content(data)

    def _extract_content(self, data: Any) -> Any:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise UpstreamError(self.name, "invalid response format") from None

        try:
            return json.loads(content)
        except (TypeError, ValueError, RecursionError):
            logger.error("Failed to parse Grok response: %s", truncate(str(content)))
            raise UpstreamError(self.name, "invalid JSON in model output") from None
