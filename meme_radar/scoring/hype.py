"""Hype score: the radar's own [0, 1] virality estimate for a coin.

Formula::

    score = 0.30 * vol_growth
          + 0.20 * kol
          + 0.10 * verified
          + 0.10 * cashtag
          + 0.10 * hashtag
          + 0.10 * wallet
          + 0.10 * grok_hype

Each component is clamped to [0, 1] before weighting and the total is
clamped again. Whatever ``hype_score`` the source supplied is ignored.
"""

from __future__ import annotations

from collections.abc import Iterable

from meme_radar.core.models import Coin

WEIGHT_VOLUME_GROWTH = 0.30
WEIGHT_KOL = 0.20
WEIGHT_VERIFIED = 0.10
WEIGHT_CASHTAG = 0.10
WEIGHT_HASHTAG = 0.10
WEIGHT_WALLET = 0.10
WEIGHT_GROK_HYPE = 0.10

MAX_VOLUME_GROWTH = 10.0
# Growth ratio used when the baseline has no tweets at all.
ZERO_BASELINE_GROWTH = 1.0

KOL_SATURATION = 10
VERIFIED_SATURATION = 20
CASHTAG_SATURATION = 50
HASHTAG_SATURATION = 100
WALLET_SATURATION = 10


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


def _saturate(count: int, ceiling: int) -> float:
    return min(count / ceiling, 1.0)


def volume_growth_component(coin: Coin) -> float:
    base = coin.baseline.tweet_count
    ratio = coin.counts.tweet_count / base if base > 0 else ZERO_BASELINE_GROWTH
    return min(ratio, MAX_VOLUME_GROWTH) / MAX_VOLUME_GROWTH


def calculate_hype_score(coin: Coin) -> float:
    """Compute the authoritative hype score for *coin*."""
    counts = coin.counts
    score = (
        WEIGHT_VOLUME_GROWTH * volume_growth_component(coin)
        + WEIGHT_KOL * _saturate(counts.kol_count, KOL_SATURATION)
        + WEIGHT_VERIFIED * _saturate(counts.verified_count, VERIFIED_SATURATION)
        + WEIGHT_CASHTAG * _saturate(counts.cashtag_count, CASHTAG_SATURATION)
        + WEIGHT_HASHTAG * _saturate(counts.hashtag_count, HASHTAG_SATURATION)
        + WEIGHT_WALLET * _saturate(counts.new_wallet_signals, WALLET_SATURATION)
        + WEIGHT_GROK_HYPE * _clamp(coin.grok_hype)
    )
    return _clamp(score)


def rescore(coin: Coin) -> Coin:
    """Return a copy of *coin* carrying the recomputed score."""
    return coin.model_copy(update={"hype_score": calculate_hype_score(coin)})


def rescore_all(coins: Iterable[Coin]) -> list[Coin]:
    return [rescore(coin) for coin in coins]
