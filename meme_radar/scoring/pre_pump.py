"""Pre-pump classifier: early momentum before the crowd arrives.

A coin is pre-pump when tweets grew at least 3x over baseline, distinct
authors at least 2x, and KOL plus verified accounts number at least 5.
A zero baseline yields a growth ratio of 0 here, so an empty baseline can
never trigger the flag on its own. The hype scorer treats the same case
differently (fixed 0.1 growth component); both conventions are kept.
"""

from __future__ import annotations

from meme_radar.core.models import Coin

MIN_TWEET_GROWTH = 3.0
MIN_AUTHOR_GROWTH = 2.0
MIN_KOL_VERIFIED = 5


def _ratio(current: int, base: int) -> float:
    return current / base if base > 0 else 0.0


def tweet_growth(coin: Coin) -> float:
    return _ratio(coin.counts.tweet_count, coin.baseline.tweet_count)


def author_growth(coin: Coin) -> float:
    return _ratio(coin.counts.unique_authors, coin.baseline.unique_authors)


def kol_verified_count(coin: Coin) -> int:
    return coin.counts.kol_count + coin.counts.verified_count


def is_pre_pump(coin: Coin) -> bool:
    return (
        tweet_growth(coin) >= MIN_TWEET_GROWTH
        and author_growth(coin) >= MIN_AUTHOR_GROWTH
        and kol_verified_count(coin) >= MIN_KOL_VERIFIED
    )
