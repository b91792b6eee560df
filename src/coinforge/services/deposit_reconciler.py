"""Deposit reconciliation: turn newly observed on-chain deposits into credits exactly once.

The processed-transaction ledger is the only de-duplication boundary. Each
new deposit is applied in its own database transaction (ledger insert plus
credit increment), so a crash never leaves a credited-but-unlogged deposit,
and the ledger's primary key rejects a second insert from a concurrent scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal

from sqlalchemy.exc import IntegrityError

from coinforge.errors.exceptions import IndexerError, UnknownAccountError
from coinforge.integrations.adapters.base import DepositSourceAdapter
from coinforge.integrations.normalized import NormalizedDeposit
from coinforge.repositories.account_repo import AccountRepository
from coinforge.repositories.transaction_repo import ProcessedTransactionRepository

logger = logging.getLogger(__name__)

CREDIT_QUANTUM = Decimal("0.00000001")


@dataclass
class ReconcileResult:
    wallet_address: str
    credits_added: Decimal = Decimal("0")
    new_transactions: list[str] = field(default_factory=list)
    failed_sources: list[str] = field(default_factory=list)
    credits: Decimal | None = None


@dataclass
class ReconcileSummary:
    accounts_scanned: int = 0
    accounts_credited: int = 0
    new_transactions: int = 0
    credits_added: Decimal = Decimal("0")
    failed_accounts: list[str] = field(default_factory=list)


def credits_for(deposit: NormalizedDeposit, credits_per_unit: Decimal) -> Decimal:
    """Convert a deposit to credits, truncated to 8 decimal places."""
    return (deposit.amount * credits_per_unit).quantize(CREDIT_QUANTUM, rounding=ROUND_DOWN)


class DepositReconciler:
    """Applies every configured deposit source to one account or to all accounts."""

    def __init__(self, session_factory, adapters: list[DepositSourceAdapter]):
        self.session_factory = session_factory
        self.adapters = adapters

    async def reconcile_one(self, wallet_address: str) -> ReconcileResult:
        """Scan every source for *wallet_address* and credit unseen deposits.

        A failing source is recorded in ``failed_sources`` and does not stop
        the other sources.

        Raises:
            UnknownAccountError: no account owns *wallet_address*.
        """
        async with self.session_factory() as session:
            account = await AccountRepository(session).get_by_wallet(wallet_address)
            if account is None:
                raise UnknownAccountError(wallet_address)
            account_id = account.account_id
            known = await ProcessedTransactionRepository(session).list_ids_for_account(account_id)

        result = ReconcileResult(wallet_address=wallet_address)

        for adapter in self.adapters:
            try:
                deposits = await adapter.fetch_deposits(wallet_address)
            except IndexerError as exc:
                logger.warning("Deposit source %s failed for %s: %s", adapter.source, wallet_address, exc)
                result.failed_sources.append(adapter.source)
                continue
            except Exception:
                logger.exception("Unexpected error reading deposit source %s for %s", adapter.source, wallet_address)
                result.failed_sources.append(adapter.source)
                continue

            for deposit in deposits:
                if deposit.external_id in known:
                    continue
                credits = credits_for(deposit, adapter.config.credits_per_unit)
                applied = await self._apply(account_id, deposit, credits)
                known.add(deposit.external_id)
                if applied:
                    result.credits_added += credits
                    result.new_transactions.append(deposit.external_id)

        async with self.session_factory() as session:
            result.credits = await AccountRepository(session).get_credits(account_id)

        if result.new_transactions:
            logger.info(
                "Reconciled %s: %d new deposits, +%s credits (balance %s)",
                wallet_address, len(result.new_transactions), result.credits_added, result.credits,
            )
        return result

    async def reconcile_all(self) -> ReconcileSummary:
        """Reconcile every account. One account's failure never stops the rest."""
        async with self.session_factory() as session:
            addresses = await AccountRepository(session).list_wallet_addresses()

        summary = ReconcileSummary()
        for address in addresses:
            summary.accounts_scanned += 1
            try:
                result = await self.reconcile_one(address)
            except Exception:
                logger.exception("Deposit reconciliation failed for %s", address)
                summary.failed_accounts.append(address)
                continue
            if result.new_transactions:
                summary.accounts_credited += 1
                summary.new_transactions += len(result.new_transactions)
                summary.credits_added += result.credits_added
        return summary

    async def _apply(self, account_id: str, deposit: NormalizedDeposit, credits: Decimal) -> bool:
        """Insert the ledger entry and increment the balance in one transaction.

        Returns False when another scan already recorded the deposit.
        """
        async with self.session_factory() as session:
            try:
                await ProcessedTransactionRepository(session).record(
                    account_id=account_id,
                    external_tx_id=deposit.external_id,
                    source=deposit.source.value,
                    currency=deposit.currency,
                    amount=deposit.amount,
                    credits_added=credits,
                )
                await AccountRepository(session).add_credits(account_id, credits)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.debug("Deposit %s already recorded for %s", deposit.external_id, account_id)
                return False

        logger.info(
            "Credited %s credits to %s from %s tx %s (%s %s)",
            credits, deposit.destination_address, deposit.source.value,
            deposit.external_id, deposit.amount, deposit.currency,
        )
        return True
