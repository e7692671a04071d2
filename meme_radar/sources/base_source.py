"""Abstract trend-source interface: swap the LLM for any upstream that speaks the schema."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from meme_radar.core.types import ChainFilter, Window


class BaseTrendSource(ABC):
    """Contract for every trend-discovery backend."""

    name: str = "trend-source"

    @abstractmethod
    async def fetch(
        self,
        window: Window,
        chain: ChainFilter = ChainFilter.ALL,
    ) -> Any:
        """Return the decoded, *unvalidated* JSON snapshot for *window*.

        Raises
        ------
        UpstreamError
            Non-2xx status, transport failure or an undecodable body.
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        return None
