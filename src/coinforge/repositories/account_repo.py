"""Account repository.

Balance changes are issued as single UPDATE statements so that concurrent
debits and deposits are serialized by the database, not by application code.
"""

from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coinforge.db.models.account import AccountRow
from coinforge.repositories.base import BaseRepository


class AccountRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, AccountRow)

    async def get(self, account_id: str) -> AccountRow | None:
        return await self.get_by_id("account_id", account_id)

    async def get_by_wallet(self, wallet_address: str) -> AccountRow | None:
        return await self.get_by_id("wallet_address", wallet_address)

    async def get_by_username(self, username: str) -> AccountRow | None:
        return await self.get_by_id("username", username)

    async def list_wallet_addresses(self) -> list[str]:
        stmt = select(AccountRow.wallet_address).order_by(AccountRow.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_credits(self, account_id: str) -> Decimal | None:
        stmt = select(AccountRow.credits).where(AccountRow.account_id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def try_debit(self, account_id: str, amount: Decimal) -> bool:
        """Decrement credits by *amount* only if the balance covers it.

        Returns False when the balance was insufficient (no row updated).
        """
        stmt = (
            update(AccountRow)
            .where(
                AccountRow.account_id == account_id,
                AccountRow.credits >= amount,
            )
            .values(credits=AccountRow.credits - amount)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def add_credits(self, account_id: str, amount: Decimal) -> bool:
        stmt = (
            update(AccountRow)
            .where(AccountRow.account_id == account_id)
            .values(credits=AccountRow.credits + amount)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
