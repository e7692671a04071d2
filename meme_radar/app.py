"""Alert service entry point wiring the trend source to the webhook.

Usage:
    python -m meme_radar.app
    python -m meme_radar.app --debug
    python -m meme_radar.app --dry-run --once
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import time
from dataclasses import replace
from datetime import timedelta
from typing import Any

from aiohttp import web
from prometheus_client import Counter, Gauge, start_http_server

from meme_radar.alerts.cooldown import AlertCooldownGate
from meme_radar.alerts.dispatcher import AlertDispatcher
from meme_radar.api import create_app
from meme_radar.config import AppConfig
from meme_radar.core.errors import ConfigurationError
from meme_radar.core.models import CycleReport, HealthStatus
from meme_radar.core.utils import setup_logging, utcnow
from meme_radar.notifier.discord_notifier import DiscordNotifier
from meme_radar.sources.base_source import BaseTrendSource
from meme_radar.sources.grok_source import GrokTrendSource
from meme_radar.sources.http_source import HttpTrendSource
from meme_radar.trending.aggregator import collect_coins, dedupe_coins
from meme_radar.trending.discovery import TrendDiscovery

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Prometheus metrics
# ---------------------------------------------------------------------------

CYCLES_TOTAL = Counter(
    "meme_radar_cycles_total",
    "Alert cycles run",
    ["outcome"],
)
WINDOW_FAILURES_TOTAL = Counter(
    "meme_radar_window_failures_total",
    "Trend fetches that failed or were rejected",
    ["window"],
)
ALERTS_TOTAL = Counter(
    "meme_radar_alerts_total",
    "Alerts sent",
    ["kind"],
)
COINS_GAUGE = Gauge(
    "meme_radar_coins_observed",
    "Unique coins observed in the last cycle",
)


def build_source(config: AppConfig) -> BaseTrendSource:
    if config.source.use_http:
        return HttpTrendSource(
            config.source.url, timeout_seconds=config.source.fetch_timeout_seconds
        )
    return GrokTrendSource(config.grok)


class MemeRadarApp:
    """Top-level orchestrator: wires source -> discovery -> gate -> dispatcher -> webhook."""

    def __init__(
        self,
        config: AppConfig,
        dry_run: bool = False,
        source: BaseTrendSource | None = None,
        notifier: DiscordNotifier | None = None,
        gate: AlertCooldownGate | None = None,
    ) -> None:
        self._config = config
        self._dry_run = dry_run
        self._start_time = time.monotonic()

        alerts = config.alerts
        self._source = source if source is not None else build_source(config)
        self._discovery = TrendDiscovery(
            self._source, fetch_timeout=config.source.fetch_timeout_seconds
        )
        self._gate = gate if gate is not None else AlertCooldownGate(
            cooldown=timedelta(minutes=alerts.cooldown_minutes)
        )
        self._notifier = (
            notifier if notifier is not None
            else DiscordNotifier(config.discord, dry_run=dry_run)
        )
        self._dispatcher = AlertDispatcher(
            notifier=self._notifier,
            gate=self._gate,
            send_delay=alerts.send_delay_ms / 1000,
            trending_limit=alerts.trending_limit,
            trending_min_score=alerts.trending_min_score,
        )

        # Background tasks
        self._tasks: list[asyncio.Task[Any]] = []
        self._runner: web.AppRunner | None = None

        # Counters for health
        self._cycles_run = 0
        self._cycles_failed = 0
        self._alerts_sent = 0
        self._last_cycle_at: str | None = None

    @property
    def discovery(self) -> TrendDiscovery:
        return self._discovery

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the API server, metrics exporter and alert loop."""
        logger.info(
            "Starting Meme Radar (dry_run=%s, source=%s)",
            self._dry_run,
            self._source.name,
        )

        if self._config.metrics.enabled:
            start_http_server(self._config.metrics.port)
            logger.info("Prometheus metrics on :%d/metrics", self._config.metrics.port)

        if self._config.server.enabled:
            await self._start_server()

        self._tasks.append(asyncio.create_task(self._alert_loop(), name="alerts"))
        await asyncio.gather(*self._tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel background tasks and release open connections."""
        logger.info("Shutting down Meme Radar...")

        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

        await self._source.close()
        await self._notifier.close()
        logger.info("Shutdown complete")

    async def run_cycle(self) -> CycleReport:
        """One alert cycle. Never raises; failures come back in the report."""
        self._cycles_run += 1
        now = utcnow()
        self._last_cycle_at = now.isoformat()

        try:
            report = await self._run_cycle()
        except Exception as exc:
            logger.exception("Alert cycle failed")
            report = CycleReport(
                ok=False,
                timestamp=now,
                message=f"Alert cycle failed: {exc}",
            )

        if report.ok:
            CYCLES_TOTAL.labels(outcome="ok").inc()
        else:
            self._cycles_failed += 1
            CYCLES_TOTAL.labels(outcome="failed").inc()
            await self._report_failure(report)
        return report

    async def _run_cycle(self) -> CycleReport:
        self._gate.sweep()

        windows = self._config.alerts.windows
        results = await self._discovery.discover_windows(windows)
        failed = [str(r.window) for r in results if not r.ok]
        for window in failed:
            WINDOW_FAILURES_TOTAL.labels(window=window).inc()

        if len(failed) == len(results):
            return CycleReport(
                ok=False,
                timestamp=utcnow(),
                message="Every window failed: " + "; ".join(
                    f"{r.window}: {r.error}" for r in results
                ),
                windows_failed=failed,
            )

        observations = dedupe_coins(collect_coins(results))
        COINS_GAUGE.set(len(observations))
        if not observations:
            logger.info("No trending coins found across all windows")
            return CycleReport(
                ok=True,
                timestamp=utcnow(),
                message="No trending coins found",
                windows_failed=failed,
            )

        logger.info(
            "Processing %d unique coins after deduplication", len(observations)
        )
        dispatch = await self._dispatcher.dispatch(observations)
        self._alerts_sent += dispatch.alerts_sent
        for sent in dispatch.sent:
            ALERTS_TOTAL.labels(kind=str(sent.kind)).inc()

        report = CycleReport(
            ok=True,
            timestamp=utcnow(),
            message="Alerts processing complete",
            windows_failed=failed,
            dispatch=dispatch,
        )
        logger.info("Alert cycle completed: %s", report.as_dict())
        return report

    async def _report_failure(self, report: CycleReport) -> None:
        logger.error("%s", report.message)
        try:
            await self._notifier.send_system_message(
                f"Alert system error: {report.message}", "error"
            )
        except Exception:
            logger.warning("Failed to send error notification", exc_info=True)

    # ------------------------------------------------------------------
    # Background loop
    # ------------------------------------------------------------------

    async def _alert_loop(self) -> None:
        """Run an alert cycle every ``check_interval_seconds``."""
        interval = self._config.alerts.check_interval_seconds

        while True:
            try:
                await self.run_cycle()
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------

    async def _start_server(self) -> None:
        app = create_app(self._discovery, self.health)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.server.host, self._config.server.port)
        await site.start()
        logger.info(
            "Dashboard API on %s:%d", self._config.server.host, self._config.server.port
        )

    async def health(self) -> HealthStatus:
        return HealthStatus(
            uptime_seconds=time.monotonic() - self._start_time,
            cycles_run=self._cycles_run,
            cycles_failed=self._cycles_failed,
            alerts_sent=self._alerts_sent,
            cooldown_entries=len(self._gate),
            last_cycle_at=self._last_cycle_at,
            source=self._source.name,
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Meme Radar: meme-coin hype scoring and pre-pump alerts"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log alerts instead of sending them",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single alert cycle and exit",
    )
    parser.add_argument(
        "--no-server",
        action="store_true",
        help="Do not start the dashboard API",
    )
    return parser.parse_args(argv)


async def _main(args: argparse.Namespace) -> int:
    config = AppConfig()
    if args.no_server:
        config = replace(config, server=replace(config.server, enabled=False))

    # Override log level if --debug
    log_level = "DEBUG" if args.debug else config.log_level
    setup_logging(level=log_level, json_format=config.log_json)

    try:
        config.validate(require_webhook=not args.dry_run)
        app = MemeRadarApp(config=config, dry_run=args.dry_run)
    except ConfigurationError as exc:
        for missing in exc.missing:
            logger.error("Config error: %s", missing)
        return 1

    if args.once:
        try:
            report = await app.run_cycle()
        finally:
            await app.shutdown()
        return 0 if report.ok else 1

    # Graceful shutdown on SIGINT / SIGTERM
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(app.shutdown()))

    try:
        await app.start()
    finally:
        await app.shutdown()
    return 0


def main() -> None:
    sys.exit(asyncio.run(_main(parse_args())))


if __name__ == "__main__":
    main()
