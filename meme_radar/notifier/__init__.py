"""Alert notification system."""

from meme_radar.notifier.discord_notifier import DiscordNotifier

__all__ = ["DiscordNotifier"]
