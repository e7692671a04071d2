"""Environment-based configuration with validation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from meme_radar.core.errors import ConfigurationError
from meme_radar.core.types import Window

# Load .env from project root or cwd
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)
else:
    load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int = 0) -> int:
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float = 0.0) -> float:
    return float(os.getenv(key, str(default)))


def _env_bool(key: str, default: bool = False) -> bool:
    return os.getenv(key, str(default)).lower() in ("1", "true", "yes")


def _env_windows(key: str, default: str) -> tuple[Window, ...]:
    raw = os.getenv(key, default)
    return tuple(Window.parse(part.strip()) for part in raw.split(",") if part.strip())


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GrokConfig:
    """xAI chat-completions endpoint used as the trend source."""

    api_key: str = field(default_factory=lambda: _env("GROK_API_KEY"))
    api_url: str = field(
        default_factory=lambda: _env(
            "GROK_API_URL", "https://api.x.ai/v1/chat/completions"
        )
    )
    model: str = field(default_factory=lambda: _env("GROK_MODEL", "grok-beta"))
    temperature: float = field(
        default_factory=lambda: _env_float("GROK_TEMPERATURE", 0.1)
    )
    max_tokens: int = field(
        default_factory=lambda: _env_int("GROK_MAX_TOKENS", 4000)
    )
    timeout_seconds: float = field(
        default_factory=lambda: _env_float("GROK_TIMEOUT_SECONDS", 60.0)
    )


@dataclass(frozen=True, slots=True)
class TrendSourceConfig:
    """Where trend snapshots come from.

    With ``url`` set, snapshots are pulled from a remote discover-trends
    endpoint; otherwise the Grok endpoint is queried directly.
    """

    url: str = field(default_factory=lambda: _env("TREND_SOURCE_URL"))
    fetch_timeout_seconds: float = field(
        default_factory=lambda: _env_float("TREND_FETCH_TIMEOUT_SECONDS", 90.0)
    )

    @property
    def use_http(self) -> bool:
        return bool(self.url)


@dataclass(frozen=True, slots=True)
class DiscordConfig:
    """Chat webhook receiving the alerts."""

    webhook_url: str = field(default_factory=lambda: _env("DISCORD_WEBHOOK_URL"))
    timeout_seconds: float = field(
        default_factory=lambda: _env_float("DISCORD_TIMEOUT_SECONDS", 10.0)
    )
    footer: str = field(
        default_factory=lambda: _env(
            "DISCORD_FOOTER", "Twitter Meme Radar • Real-time crypto trend detection"
        )
    )


@dataclass(frozen=True, slots=True)
class AlertConfig:
    """Alert cycle, cooldown and throttling."""

    cooldown_minutes: int = field(
        default_factory=lambda: _env_int("ALERT_COOLDOWN_MINUTES", 10)
    )
    windows: tuple[Window, ...] = field(
        default_factory=lambda: _env_windows("ALERT_WINDOWS", "1m,5m,15m")
    )
    check_interval_seconds: int = field(
        default_factory=lambda: _env_int("ALERT_CHECK_INTERVAL", 300)
    )
    send_delay_ms: int = field(
        default_factory=lambda: _env_int("ALERT_SEND_DELAY_MS", 200)
    )
    trending_limit: int = field(
        default_factory=lambda: _env_int("ALERT_TRENDING_LIMIT", 3)
    )
    trending_min_score: float = field(
        default_factory=lambda: _env_float("ALERT_TRENDING_MIN_SCORE", 0.5)
    )


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Dashboard query surface and health endpoint."""

    enabled: bool = field(
        default_factory=lambda: _env_bool("SERVER_ENABLED", True)
    )
    host: str = field(default_factory=lambda: _env("SERVER_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("SERVER_PORT", 8080))


@dataclass(frozen=True, slots=True)
class MetricsConfig:
    """Prometheus metrics settings."""

    enabled: bool = field(
        default_factory=lambda: _env_bool("METRICS_ENABLED", False)
    )
    port: int = field(
        default_factory=lambda: _env_int("METRICS_PORT", 9090)
    )


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Root application configuration aggregating all sub-configs."""

    grok: GrokConfig = field(default_factory=GrokConfig)
    source: TrendSourceConfig = field(default_factory=TrendSourceConfig)
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    log_level: str = field(
        default_factory=lambda: _env("LOG_LEVEL", "INFO")
    )
    log_json: bool = field(
        default_factory=lambda: _env_bool("LOG_JSON", False)
    )

    def validate(self, *, require_webhook: bool = True) -> None:
        """Raise :class:`ConfigurationError` listing every missing credential."""
        errors: list[str] = []
        if not self.source.use_http and not self.grok.api_key:
            errors.append("GROK_API_KEY is required (or set TREND_SOURCE_URL)")
        if require_webhook and not self.discord.webhook_url:
            errors.append("DISCORD_WEBHOOK_URL is required")
        if not self.alerts.windows:
            errors.append("ALERT_WINDOWS must name at least one window")
        if self.alerts.cooldown_minutes <= 0:
            errors.append("ALERT_COOLDOWN_MINUTES must be positive")
        if errors:
            raise ConfigurationError(errors)
