"""Hype scoring and pre-pump classification."""

from meme_radar.scoring.hype import calculate_hype_score, rescore, rescore_all
from meme_radar.scoring.pre_pump import (
    author_growth,
    is_pre_pump,
    kol_verified_count,
    tweet_growth,
)

__all__ = [
    "author_growth",
    "calculate_hype_score",
    "is_pre_pump",
    "kol_verified_count",
    "rescore",
    "rescore_all",
    "tweet_growth",
]
