"""Per-coin alert cooldown."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from meme_radar.core.models import Coin
from meme_radar.core.utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN = timedelta(minutes=10)

AlertKey = tuple[str, str]
Clock = Callable[[], datetime]


def alert_key(coin: Coin) -> AlertKey:
    """``(SYMBOL, CHAIN)``: the same coin in any letter case shares a cooldown."""
    return coin.identity


class AlertCooldownGate:
    """Suppresses repeat alerts for the same coin within ``cooldown``.

    Each key is either *eligible* (no entry, or last send more than
    ``cooldown`` ago) or *suppressed*. :meth:`should_send_alert` checks and
    stamps in one step under a lock, so two concurrent cycles can never both
    win the same key. Entries older than twice the cooldown are dropped by
    :meth:`sweep`.
    """

    def __init__(
        self,
        cooldown: timedelta = DEFAULT_COOLDOWN,
        clock: Clock = utcnow,
    ) -> None:
        self._cooldown = cooldown
        self._clock = clock
        self._lock = threading.Lock()
        # key -> last send time
        self._history: dict[AlertKey, datetime] = {}

    @property
    def cooldown(self) -> timedelta:
        return self._cooldown

    def __len__(self) -> int:
        return len(self._history)

    def last_sent(self, coin: Coin) -> datetime | None:
        return self._history.get(alert_key(coin))

    def is_on_cooldown(self, coin: Coin) -> bool:
        """Read-only check; does not stamp."""
        last = self._history.get(alert_key(coin))
        if last is None:
            return False
        return self._clock() - last <= self._cooldown

    def should_send_alert(self, coin: Coin) -> bool:
        """Return True and stamp the coin suppressed-from-now if it is eligible."""
        key = alert_key(coin)
        with self._lock:
            now = self._clock()
            last = self._history.get(key)
            if last is not None and now - last <= self._cooldown:
                logger.debug("Skipping %s/%s: on cooldown", *key)
                return False
            self._history[key] = now
            return True

    def revoke(self, coin: Coin) -> None:
        """Forget the stamp left by a send that failed.

        The key was eligible when it was stamped, so dropping the entry
        restores exactly that state.
        """
        with self._lock:
            self._history.pop(alert_key(coin), None)

    def sweep(self) -> int:
        """Evict entries older than twice the cooldown; return how many."""
        with self._lock:
            now = self._clock()
            limit = self._cooldown * 2
            expired = [k for k, v in self._history.items() if now - v > limit]
            for k in expired:
                del self._history[k]
        if expired:
            logger.debug("Evicted %d stale alert history entries", len(expired))
        return len(expired)
