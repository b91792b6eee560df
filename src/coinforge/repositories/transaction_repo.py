"""Processed-transaction ledger repository."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coinforge.db.base import utcnow
from coinforge.db.models.account import ProcessedTransactionRow
from coinforge.repositories.base import BaseRepository


class ProcessedTransactionRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ProcessedTransactionRow)

    async def list_ids_for_account(self, account_id: str) -> set[str]:
        stmt = select(ProcessedTransactionRow.external_tx_id).where(
            ProcessedTransactionRow.account_id == account_id
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def list_for_account(self, account_id: str) -> list[ProcessedTransactionRow]:
        return await self.list_by_field("account_id", account_id, order_by="observed_at")

    async def record(
        self,
        account_id: str,
        external_tx_id: str,
        source: str,
        currency: str,
        amount: Decimal,
        credits_added: Decimal,
    ) -> ProcessedTransactionRow:
        return await self.create(
            external_tx_id=external_tx_id,
            account_id=account_id,
            source=source,
            currency=currency,
            amount=amount,
            credits_added=credits_added,
            observed_at=utcnow(),
        )
