"""Wallet-creation collaborator.

Key generation lives in a separate signing service; this module only talks
to it over HTTP.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx

from coinforge.errors.exceptions import WalletProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletKeys:
    receiving_address: str
    mnemonic: str
    xprv: str


class WalletProvider(ABC):
    @abstractmethod
    async def create_wallet(self) -> WalletKeys:
        ...


class RpcWalletProvider(WalletProvider):
    """Calls ``POST {base_url}/create-wallet`` on the wallet service."""

    def __init__(self, base_url: str, timeout: float = 30.0, client: httpx.AsyncClient | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def create_wallet(self) -> WalletKeys:
        url = f"{self.base_url}/create-wallet"
        try:
            if self._client is not None:
                resp = await self._client.post(url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            logger.error("Wallet service request failed: %s", exc)
            raise WalletProviderError(f"Wallet service unavailable: {exc}") from exc
        except ValueError as exc:
            raise WalletProviderError("Wallet service returned a non-JSON response") from exc

        if not isinstance(data, dict) or not data.get("success", True):
            raise WalletProviderError(f"Wallet creation failed: {data.get('error') if isinstance(data, dict) else data}")

        address = data.get("receivingAddress") or data.get("walletAddress")
        mnemonic = data.get("mnemonic")
        xprv = data.get("xPrv")
        if not address or not mnemonic or not xprv:
            raise WalletProviderError("Wallet service response is missing keys")
        return WalletKeys(receiving_address=address, mnemonic=mnemonic, xprv=xprv)
