"""Unit tests for the alert cooldown gate."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from factories import FakeClock, make_coin
from meme_radar.alerts.cooldown import AlertCooldownGate, alert_key


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate(clock: FakeClock) -> AlertCooldownGate:
    return AlertCooldownGate(cooldown=timedelta(minutes=10), clock=clock)


class TestCooldownWindow:
    def test_first_alert_allowed(self, gate: AlertCooldownGate) -> None:
        assert gate.should_send_alert(make_coin("FOO", "SOL"))

    def test_immediate_repeat_suppressed(self, gate: AlertCooldownGate) -> None:
        coin = make_coin("FOO", "SOL")
        assert gate.should_send_alert(coin)
        assert not gate.should_send_alert(coin)

    def test_still_suppressed_just_before_expiry(
        self, gate: AlertCooldownGate, clock: FakeClock
    ) -> None:
        coin = make_coin("FOO", "SOL")
        assert gate.should_send_alert(coin)
        clock.advance(minutes=9, seconds=59)
        assert not gate.should_send_alert(coin)

    def test_eligible_just_after_expiry(
        self, gate: AlertCooldownGate, clock: FakeClock
    ) -> None:
        coin = make_coin("FOO", "SOL")
        assert gate.should_send_alert(coin)
        clock.advance(minutes=10, seconds=1)
        assert gate.should_send_alert(coin)

    def test_exactly_at_cooldown_is_suppressed(
        self, gate: AlertCooldownGate, clock: FakeClock
    ) -> None:
        coin = make_coin("FOO", "SOL")
        gate.should_send_alert(coin)
        clock.advance(minutes=10)
        assert not gate.should_send_alert(coin)

    def test_suppressed_check_does_not_restamp(
        self, gate: AlertCooldownGate, clock: FakeClock
    ) -> None:
        coin = make_coin("FOO", "SOL")
        gate.should_send_alert(coin)
        sent_at = gate.last_sent(coin)
        clock.advance(minutes=5)
        assert not gate.should_send_alert(coin)
        assert gate.last_sent(coin) == sent_at
        clock.advance(minutes=5, seconds=1)
        assert gate.should_send_alert(coin)

    def test_key_is_case_insensitive(self, gate: AlertCooldownGate) -> None:
        assert gate.should_send_alert(make_coin("foo", "sol"))
        assert not gate.should_send_alert(make_coin("FOO", "SOL"))
        assert alert_key(make_coin("Foo", "Sol")) == ("FOO", "SOL")

    def test_chains_are_independent(self, gate: AlertCooldownGate) -> None:
        assert gate.should_send_alert(make_coin("FOO", "SOL"))
        assert gate.should_send_alert(make_coin("FOO", "ETH"))

    def test_is_on_cooldown_is_read_only(self, gate: AlertCooldownGate) -> None:
        coin = make_coin()
        assert not gate.is_on_cooldown(coin)
        assert len(gate) == 0
        gate.should_send_alert(coin)
        assert gate.is_on_cooldown(coin)


class TestRevoke:
    def test_revoke_restores_eligibility(self, gate: AlertCooldownGate) -> None:
        coin = make_coin()
        assert gate.should_send_alert(coin)
        gate.revoke(coin)
        assert gate.last_sent(coin) is None
        assert gate.should_send_alert(coin)

    def test_revoke_unknown_key_is_noop(self, gate: AlertCooldownGate) -> None:
        gate.revoke(make_coin("NOPE"))
        assert len(gate) == 0


class TestSweep:
    def test_evicts_entries_older_than_twice_cooldown(
        self, gate: AlertCooldownGate, clock: FakeClock
    ) -> None:
        gate.should_send_alert(make_coin("OLD"))
        clock.advance(minutes=20, seconds=1)
        assert gate.sweep() == 1
        assert len(gate) == 0

    def test_keeps_entry_at_exactly_twice_cooldown(
        self, gate: AlertCooldownGate, clock: FakeClock
    ) -> None:
        gate.should_send_alert(make_coin("EDGE"))
        clock.advance(minutes=20)
        assert gate.sweep() == 0
        assert len(gate) == 1

    def test_sweep_does_not_shorten_active_cooldown(
        self, gate: AlertCooldownGate, clock: FakeClock
    ) -> None:
        old, recent = make_coin("OLD"), make_coin("NEW")
        gate.should_send_alert(old)
        clock.advance(minutes=15)
        gate.should_send_alert(recent)
        clock.advance(minutes=5, seconds=1)

        assert gate.sweep() == 1
        assert gate.last_sent(old) is None
        assert gate.last_sent(recent) is not None
        assert not gate.should_send_alert(recent)


class TestConcurrency:
    def test_only_one_concurrent_caller_wins(self, gate: AlertCooldownGate) -> None:
        coin = make_coin()
        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda _: gate.should_send_alert(coin), range(64)))
        assert results.count(True) == 1
