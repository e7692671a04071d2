"""Exception hierarchy."""

from __future__ import annotations


class MemeRadarError(Exception):
    """Base class for every error raised by the radar."""


class ValidationError(MemeRadarError):
    """External data failed schema validation.

    ``field`` is the dotted path of the first violated constraint
    (``coins.0.counts.kol_count``), or ``""`` for the document root.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        location = field or "<root>"
        super().__init__(f"{location}: {message}")


class UpstreamError(MemeRadarError):
    """An external collaborator answered non-2xx or could not be reached."""

    def __init__(
        self,
        service: str,
        message: str,
        status: int | None = None,
    ) -> None:
        self.service = service
        self.message = message
        self.status = status
        prefix = f"{service} {status}" if status is not None else service
        super().__init__(f"{prefix}: {message}")


class ConfigurationError(MemeRadarError):
    """A required credential or setting is missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__("; ".join(self.missing))
