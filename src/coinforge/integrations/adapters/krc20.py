"""KRC-20 token source adapter: pulls token transfers from the Kasplex indexer."""

from __future__ import annotations

import logging

from coinforge.errors.exceptions import IndexerError
from coinforge.integrations.adapters.base import DepositSourceAdapter
from coinforge.integrations.normalized import NormalizedDeposit, to_whole_units

logger = logging.getLogger(__name__)


class Krc20Adapter(DepositSourceAdapter):
    """Pulls token transfer operations from ``GET /v1/krc20/oplist``.

    Expected configuration:
        base_url:  e.g. ``https://api.kasplex.org``
        currency:  the token ticker (``KASPER``)
        labels:    optional ``{"tick": "..."}`` overriding the ticker sent upstream.
    """

    adapter_type: str = "krc20"

    async def fetch_deposits(self, address: str) -> list[NormalizedDeposit]:
        tick = self.config.labels.get("tick", self.config.currency)
        url = self.config.url("/v1/krc20/oplist")
        params: dict[str, str] = {"address": address, "tick": tick}

        deposits: list[NormalizedDeposit] = []
        seen: set[str] = set()
        for _ in range(self.config.max_pages):
            payload = await self._get_json(url, params=params)
            if not isinstance(payload, dict) or payload.get("message") != "successful":
                message = payload.get("message") if isinstance(payload, dict) else None
                raise IndexerError(self.source, f"Unexpected KRC-20 response: {message!r}")

            records = payload.get("result") or []
            for record in records:
                deposit = self._normalize(record, address)
                if deposit is not None and deposit.external_id not in seen:
                    seen.add(deposit.external_id)
                    deposits.append(deposit)

            cursor = payload.get("next")
            if not cursor or not records:
                break
            params = {**params, "next": cursor}

        logger.debug("Fetched %d %s deposits for %s", len(deposits), tick, address)
        return deposits

    def _normalize(self, record: dict, address: str) -> NormalizedDeposit | None:
        tx_id = record.get("hashRev")
        if not tx_id:
            return None
        if str(record.get("op", "")).lower() != "transfer":
            return None
        if record.get("to") != address:
            return None
        # Rejected operations carry opAccept != "1"
        accepted = record.get("opAccept")
        if accepted is not None and str(accepted) != "1":
            return None
        try:
            raw_amount = int(record.get("amt", 0))
        except (TypeError, ValueError):
            logger.warning("Skipping KRC-20 record %s with unparseable amount %r", tx_id, record.get("amt"))
            return None
        if raw_amount <= 0:
            return None

        return NormalizedDeposit(
            external_id=tx_id,
            source=self.config.source,
            currency=self.config.currency,
            destination_address=address,
            raw_amount=raw_amount,
            amount=to_whole_units(raw_amount),
            raw_record=record,
        )
