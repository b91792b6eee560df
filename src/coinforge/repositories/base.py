"""Base repository with common async query helpers."""

from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coinforge.db.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository:
    """Generic async repository over one ORM model.

    Repositories never commit; the caller owns the transaction boundary.
    """

    def __init__(self, session: AsyncSession, model_class: type[T]):
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, field: str, value: Any) -> T | None:
        """Get the single row whose unique *field* equals *value*."""
        stmt = select(self.model_class).where(getattr(self.model_class, field) == value)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> T:
        """Add a row and flush so constraint violations surface here."""
        row = self.model_class(**kwargs)
        self.session.add(row)
        await self.session.flush()
        return row

    async def list_by_field(self, field: str, value: Any, order_by: str | None = None) -> list[T]:
        stmt = select(self.model_class).where(getattr(self.model_class, field) == value)
        if order_by:
            stmt = stmt.order_by(getattr(self.model_class, order_by))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
