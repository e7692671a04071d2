"""Meme Radar: meme-coin hype scoring and pre-pump alerting."""

__version__ = "0.1.0"
