"""Validation of untrusted trend-source documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pydantic

from meme_radar.core.errors import ValidationError
from meme_radar.core.models import QueryParams, TrendResponse
from meme_radar.core.types import ChainFilter, Window


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Tagged outcome of :func:`parse_trend_response`."""

    value: TrendResponse | None = None
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _first_error(exc: pydantic.ValidationError) -> ValidationError:
    first = exc.errors()[0]
    path = ".".join(str(part) for part in first["loc"])
    return ValidationError(path, first["msg"])


def validate_trend_response(data: Any) -> TrendResponse:
    """Parse *data* into a :class:`TrendResponse` or raise.

    Raises
    ------
    ValidationError
        Naming the first violated field, e.g. ``window_used`` when it is
        missing or ``coins.2.grok_hype`` when it is out of range.
    """
    if not isinstance(data, dict):
        raise ValidationError("", f"expected a JSON object, got {type(data).__name__}")
    try:
        return TrendResponse.model_validate(data)
    except pydantic.ValidationError as exc:
        raise _first_error(exc) from None


def parse_trend_response(data: Any) -> ParseResult:
    """Non-raising variant of :func:`validate_trend_response`."""
    try:
        return ParseResult(value=validate_trend_response(data))
    except ValidationError as exc:
        return ParseResult(error=exc)


def validate_window(value: str | None) -> Window:
    return Window.parse(value or Window.M5.value)


def validate_query_params(
    window: str | None = None,
    chain: str | None = None,
) -> QueryParams:
    """Validate dashboard query parameters, applying ``5m`` / ``ALL`` defaults."""
    parsed_window = validate_window(window)
    raw_chain = (chain or ChainFilter.ALL.value).upper()
    try:
        parsed_chain = ChainFilter(raw_chain)
    except ValueError:
        allowed = ", ".join(c.value for c in ChainFilter)
        raise ValidationError(
            "chain", f"must be one of {allowed}, got {chain!r}"
        ) from None
    return QueryParams(window=parsed_window, chain=parsed_chain)
