"""Shared enumerations."""

from __future__ import annotations

from enum import Enum

from meme_radar.core.errors import ValidationError


class Window(str, Enum):
    """Lookback windows, declared in their display order."""

    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    H1 = "1h"
    H4 = "4h"
    H24 = "24h"

    def __str__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        """Position in the fixed ``1m < 5m < 15m < 1h < 4h < 24h`` order."""
        return _WINDOW_ORDER.index(self)

    @classmethod
    def ordered(cls) -> list[Window]:
        return list(_WINDOW_ORDER)

    @classmethod
    def parse(cls, value: str | Window) -> Window:
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(w.value for w in _WINDOW_ORDER)
            raise ValidationError(
                "window", f"must be one of {allowed}, got {value!r}"
            ) from None


_WINDOW_ORDER: tuple[Window, ...] = tuple(Window)


class ChainFilter(str, Enum):
    """Chain filter accepted by the query surface."""

    SOL = "SOL"
    ETH = "ETH"
    BSC = "BSC"
    ALL = "ALL"

    def __str__(self) -> str:
        return self.value


class AlertKind(str, Enum):
    """Kinds of notification the dispatcher can emit."""

    PRE_PUMP = "pre_pump"
    TRENDING = "trending"
    ALERT = "alert"

    def __str__(self) -> str:
        return self.value
