"""Domain models used across the application.

Everything arriving from the trend source is modelled with pydantic so a
malformed document is rejected as a whole; internal bookkeeping uses plain
dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Annotated, Any
from urllib.parse import urlparse

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from meme_radar.core.types import AlertKind, ChainFilter, Window


def _json_number(value: Any) -> Any:
    # JSON has one number type: 12.0 is a count, "12" and true are not.
    if isinstance(value, (str, bytes, bool)):
        raise ValueError("must be a JSON number")
    return value


Count = Annotated[int, BeforeValidator(_json_number), Field(ge=0)]
Unit = Annotated[float, Field(strict=True, ge=0.0, le=1.0)]
Signed = Annotated[float, Field(strict=True, ge=-1.0, le=1.0)]
Text = Annotated[str, Field(strict=True)]

REASON_MAX_CHARS = 18 * 10

IDENTITY_FIELDS = frozenset({"symbol", "chain", "name", "contract_address"})


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Tweet(_Model):
    """One of the top posts backing a coin observation."""

    url: Text
    author_handle: Text
    is_verified: Annotated[bool, Field(strict=True)]
    is_kol: Annotated[bool, Field(strict=True)]

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be an absolute http(s) URL")
        return value


class Counts(_Model):
    """Engagement counters for the current window."""

    tweet_count: Count
    unique_authors: Count
    verified_count: Count
    kol_count: Count
    cashtag_count: Count
    hashtag_count: Count
    new_wallet_signals: Count


class Baseline(_Model):
    """Comparison counters from the previous window or a rolling average."""

    window: Text
    tweet_count: Count
    unique_authors: Count
    verified_count: Count
    kol_count: Count
    cashtag_count: Count
    hashtag_count: Count


class Coin(_Model):
    """One coin observation for one window and one chain."""

    symbol: Text
    chain: Text
    name: Text | None = None
    contract_address: Text | None = None
    cashtags: list[Text]
    hashtags: list[Text]
    top_tweets: list[Tweet]
    counts: Counts
    baseline: Baseline
    sentiment: Signed
    grok_hype: Unit
    reason_short: Annotated[str, Field(strict=True, max_length=REASON_MAX_CHARS)]
    # Always overwritten by the scorer after validation.
    hype_score: Unit

    @property
    def identity(self) -> tuple[str, str]:
        """Case-normalised ``(symbol, chain)`` key."""
        return (self.symbol.upper(), self.chain.upper())

    def window_fields(self) -> dict[str, Any]:
        """Serialised coin without the identity fields."""
        return self.model_dump(mode="json", exclude=set(IDENTITY_FIELDS))


class TrendResponse(_Model):
    """A validated snapshot returned by the trend source."""

    coins: list[Coin]
    window_used: Window
    generated_at_iso: Text

    @field_validator("generated_at_iso")
    @classmethod
    def _iso_datetime(cls, value: str) -> str:
        if "T" not in value:
            raise ValueError("must be an ISO-8601 datetime")
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("must be an ISO-8601 datetime") from None
        if moment.utcoffset() != timedelta(0):
            raise ValueError("must be a UTC datetime")
        return value


class QueryParams(_Model):
    """Validated ``window`` / ``chain`` query parameters."""

    window: Window = Window.M5
    chain: ChainFilter = ChainFilter.ALL


class SparklinePoint(_Model):
    window: Window
    hype_score: float
    timestamp: str


class CoinDetail(_Model):
    """Multi-window view of a single coin."""

    symbol: str
    chain: str
    name: str | None = None
    contract_address: str | None = None
    windows: dict[Window, dict[str, Any]]
    hype_sparkline: list[SparklinePoint]


# ---------------------------------------------------------------------------
# Internal bookkeeping
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WindowedCoin:
    """A coin together with the window it was observed in."""

    coin: Coin
    window: Window

    @property
    def identity(self) -> tuple[str, str]:
        return self.coin.identity


@dataclass(frozen=True, slots=True)
class WindowResult:
    """Outcome of fetching one window: a response or an error, never both."""

    window: Window
    response: TrendResponse | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.response is not None


@dataclass(slots=True)
class SentAlert:
    symbol: str
    chain: str
    window: Window
    kind: AlertKind
    hype_score: float


@dataclass(slots=True)
class DispatchReport:
    """What one dispatch pass did."""

    coins_processed: int = 0
    pre_pump_count: int = 0
    trending_count: int = 0
    alerts_sent: int = 0
    failed_sends: int = 0
    suppressed: int = 0
    summary_sent: bool = False
    sent: list[SentAlert] = field(default_factory=list)


@dataclass(slots=True)
class CycleReport:
    """Result of a full alert cycle, successful or not."""

    ok: bool
    timestamp: datetime
    message: str
    windows_failed: list[str] = field(default_factory=list)
    dispatch: DispatchReport | None = None

    def as_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "ok": self.ok,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "windows_failed": list(self.windows_failed),
        }
        if self.dispatch is not None:
            body.update(
                alerts_sent=self.dispatch.alerts_sent,
                coins_processed=self.dispatch.coins_processed,
                pre_pump_count=self.dispatch.pre_pump_count,
                trending_count=self.dispatch.trending_count,
            )
        return body


@dataclass(slots=True)
class HealthStatus:
    """Application health snapshot."""

    uptime_seconds: float = 0.0
    cycles_run: int = 0
    cycles_failed: int = 0
    alerts_sent: int = 0
    cooldown_entries: int = 0
    last_cycle_at: str | None = None
    source: str = ""
