"""Order, gate and throttle outbound alerts for one cycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from meme_radar.alerts.cooldown import AlertCooldownGate
from meme_radar.core.models import DispatchReport, SentAlert, WindowedCoin
from meme_radar.core.types import AlertKind
from meme_radar.notifier.discord_notifier import DiscordNotifier
from meme_radar.scoring.pre_pump import is_pre_pump

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class AlertDispatcher:
    """Sends pre-pump alerts first, then the top trending coins.

    * pre-pump: every coin the classifier flags and the gate lets through
    * trending: not pre-pump, ``hype_score >= trending_min_score``; the
      highest-scoring ``trending_limit`` that pass the gate
    * each coin consults the gate at most once per cycle
    * ``send_delay`` seconds between consecutive sends
    * a failed send is logged and the cycle moves on; no retry
    """

    def __init__(
        self,
        notifier: DiscordNotifier,
        gate: AlertCooldownGate,
        send_delay: float = 0.2,
        trending_limit: int = 3,
        trending_min_score: float = 0.5,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._notifier = notifier
        self._gate = gate
        self._send_delay = send_delay
        self._trending_limit = trending_limit
        self._trending_min_score = trending_min_score
        self._sleep = sleep

    def partition(
        self,
        observations: Sequence[WindowedCoin],
    ) -> tuple[list[WindowedCoin], list[WindowedCoin]]:
        """Split into ``(pre_pump, trending)`` candidates, before gating.

        Trending candidates come back sorted by descending score; ties keep
        input order.
        """
        pre_pump: list[WindowedCoin] = []
        trending: list[WindowedCoin] = []
        for obs in observations:
            if is_pre_pump(obs.coin):
                pre_pump.append(obs)
            elif obs.coin.hype_score >= self._trending_min_score:
                trending.append(obs)
        trending.sort(key=lambda o: o.coin.hype_score, reverse=True)
        return pre_pump, trending

    async def dispatch(self, observations: Sequence[WindowedCoin]) -> DispatchReport:
        report = DispatchReport(coins_processed=len(observations))
        pre_pump, trending = self.partition(observations)

        queue: list[tuple[WindowedCoin, AlertKind]] = []
        for obs in pre_pump:
            if self._gate.should_send_alert(obs.coin):
                queue.append((obs, AlertKind.PRE_PUMP))
            else:
                report.suppressed += 1

        passed = 0
        for obs in trending:
            if passed >= self._trending_limit:
                break
            if self._gate.should_send_alert(obs.coin):
                queue.append((obs, AlertKind.TRENDING))
                passed += 1
            else:
                report.suppressed += 1

        report.pre_pump_count = sum(1 for _, k in queue if k is AlertKind.PRE_PUMP)
        report.trending_count = passed
        logger.info(
            "Pre-pump coins: %d, trending coins: %d (suppressed %d)",
            report.pre_pump_count,
            report.trending_count,
            report.suppressed,
        )

        for index, (obs, kind) in enumerate(queue):
            if index and self._send_delay > 0:
                await self._sleep(self._send_delay)
            await self._send(obs, kind, report)

        if report.alerts_sent == 0 and observations:
            await self._send_summary(observations, report)

        return report

    async def _send(
        self,
        obs: WindowedCoin,
        kind: AlertKind,
        report: DispatchReport,
    ) -> None:
        coin = obs.coin
        try:
            await self._notifier.send_alert(coin, obs.window, kind)
        except Exception:
            logger.exception(
                "Failed to send %s alert for %s (%s)", kind, coin.symbol, coin.chain
            )
            self._gate.revoke(coin)
            report.failed_sends += 1
            return

        report.alerts_sent += 1
        report.sent.append(
            SentAlert(
                symbol=coin.symbol,
                chain=coin.chain,
                window=obs.window,
                kind=kind,
                hype_score=coin.hype_score,
            )
        )
        logger.info(
            "Sent %s alert for %s (%s, score=%.2f) from %s window",
            kind,
            coin.symbol,
            coin.chain,
            coin.hype_score,
            obs.window,
        )

    async def _send_summary(
        self,
        observations: Sequence[WindowedCoin],
        report: DispatchReport,
    ) -> None:
        top = max(observations, key=lambda o: o.coin.hype_score).coin
        message = (
            f"Monitoring {len(observations)} coins. Top: ${top.symbol} "
            f"({top.chain}) with {top.hype_score * 100:.0f}% hype score."
        )
        try:
            await self._notifier.send_system_message(message, "info")
        except Exception:
            logger.warning("Failed to send monitoring summary", exc_info=True)
            return
        report.summary_sent = True
