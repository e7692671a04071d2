"""Tests for shared helpers."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone

from meme_radar.core.utils import JsonLineFormatter, isoformat, truncate


class TestIsoformat:
    def test_utc_gets_z_suffix(self) -> None:
        moment = datetime(2025, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
        assert isoformat(moment) == "2025-01-01T12:00:00.123Z"

    def test_converts_to_utc(self) -> None:
        moment = datetime(2025, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert isoformat(moment) == "2025-01-01T12:00:00.000Z"


class TestTruncate:
    def test_short_text_unchanged(self) -> None:
        assert truncate("ok", 10) == "ok"

    def test_long_text_clipped(self) -> None:
        assert truncate("x" * 20, 5) == "xxxxx..."


def test_json_formatter_escapes_message() -> None:
    record = logging.LogRecord(
        "meme_radar.test", logging.INFO, __file__, 1, 'said "%s"', ("hi",), None
    )
    line = JsonLineFormatter().format(record)
    payload = json.loads(line)
    assert payload["message"] == 'said "hi"'
    assert payload["level"] == "INFO"
    assert payload["logger"] == "meme_radar.test"
