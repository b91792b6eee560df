"""Generated-file history repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from coinforge.db.base import utcnow
from coinforge.db.models.account import GeneratedFileRow
from coinforge.repositories.base import BaseRepository
from coinforge.services.id_generator import generate_id


class GeneratedFileRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, GeneratedFileRow)

    async def append(self, account_id: str, job_id: str, content: str) -> GeneratedFileRow:
        return await self.create(
            file_id=generate_id("file_"),
            account_id=account_id,
            job_id=job_id,
            content=content,
            created_at=utcnow(),
        )

    async def list_for_account(self, account_id: str) -> list[GeneratedFileRow]:
        return await self.list_by_field("account_id", account_id, order_by="created_at")
