"""Abstract base class for deposit source adapters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from coinforge.errors.exceptions import IndexerError
from coinforge.integrations.config import DepositSourceConfig
from coinforge.integrations.normalized import NormalizedDeposit

logger = logging.getLogger(__name__)


class DepositSourceAdapter(ABC):
    """Pulls an address's transaction feed and converts it to NormalizedDeposits."""

    adapter_type: str = "unknown"

    def __init__(self, config: DepositSourceConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self._client = client

    @property
    def source(self) -> str:
        return self.config.source.value

    @abstractmethod
    async def fetch_deposits(self, address: str) -> list[NormalizedDeposit]:
        """Return every deposit to *address* visible in the feed.

        Raises:
            IndexerError: the feed could not be read or had an unexpected shape.
        """
        ...

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        try:
            if self._client is not None:
                resp = await self._client.get(url, params=params, timeout=self.config.timeout_seconds)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(url, params=params, timeout=self.config.timeout_seconds)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise IndexerError(
                self.source,
                f"{self.adapter_type} indexer returned HTTP {exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise IndexerError(self.source, f"HTTP error reaching {self.adapter_type} indexer: {exc}") from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise IndexerError(self.source, f"Non-JSON response from {self.adapter_type} indexer") from exc
