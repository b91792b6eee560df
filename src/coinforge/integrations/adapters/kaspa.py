"""Kaspa source adapter: pulls base-currency transactions from the Kaspa REST API."""

from __future__ import annotations

import logging
from urllib.parse import quote

from coinforge.errors.exceptions import IndexerError
from coinforge.integrations.adapters.base import DepositSourceAdapter
from coinforge.integrations.normalized import NormalizedDeposit, to_whole_units

logger = logging.getLogger(__name__)


class KaspaAdapter(DepositSourceAdapter):
    """Pulls transactions from ``GET /addresses/{address}/full-transactions-page``.

    A transaction can pay the same address in several outputs; the deposit
    amount is the sum of all of them.
    """

    adapter_type: str = "kaspa"

    async def fetch_deposits(self, address: str) -> list[NormalizedDeposit]:
        url = self.config.url(f"/addresses/{quote(address, safe=':')}/full-transactions-page")
        params: dict[str, str | int] = {
            "limit": self.config.page_limit,
            "resolve_previous_outpoints": "no",
        }

        deposits: list[NormalizedDeposit] = []
        seen: set[str] = set()
        for _ in range(self.config.max_pages):
            payload = await self._get_json(url, params=params)
            if not isinstance(payload, list):
                raise IndexerError(self.source, "Unexpected Kaspa response: expected a list of transactions")

            for tx in payload:
                deposit = self._normalize(tx, address)
                if deposit is not None and deposit.external_id not in seen:
                    seen.add(deposit.external_id)
                    deposits.append(deposit)

            if len(payload) < self.config.page_limit:
                break
            oldest = min((tx.get("block_time") or 0 for tx in payload), default=0)
            if not oldest:
                break
            params = {**params, "before": oldest}

        logger.debug("Fetched %d KAS deposits for %s", len(deposits), address)
        return deposits

    def _normalize(self, tx: dict, address: str) -> NormalizedDeposit | None:
        tx_id = tx.get("hash") or tx.get("transaction_id")
        if not tx_id:
            return None
        if tx.get("is_accepted") is False:
            return None

        raw_amount = 0
        for output in tx.get("outputs") or []:
            if output.get("script_public_key_address") != address:
                continue
            try:
                raw_amount += int(output.get("amount", 0))
            except (TypeError, ValueError):
                logger.warning("Skipping unparseable output amount %r in tx %s", output.get("amount"), tx_id)
        if raw_amount <= 0:
            return None

        return NormalizedDeposit(
            external_id=tx_id,
            source=self.config.source,
            currency=self.config.currency,
            destination_address=address,
            raw_amount=raw_amount,
            amount=to_whole_units(raw_amount),
            raw_record=tx,
        )
