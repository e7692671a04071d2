"""Cooldown gating and alert dispatch."""

from meme_radar.alerts.cooldown import AlertCooldownGate, alert_key
from meme_radar.alerts.dispatcher import AlertDispatcher

__all__ = ["AlertCooldownGate", "AlertDispatcher", "alert_key"]
