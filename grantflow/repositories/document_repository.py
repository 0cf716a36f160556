"""Repository for document records."""

from typing import Any, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grantflow.database.models import Document
from grantflow.repositories.base_repository import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, Document)

    async def update_status(self, id: UUID, status: str, **fields: Any) -> Document | None:
        """Move a document to ``status``, writing any extra columns alongside."""
        return await self.update(id, status=status, **fields)

    async def list_by_profile(
        self,
        profile_id: UUID,
        skip: int = 0,
        limit: int = 200,
    ) -> List[Document]:
        """Documents of a profile, newest first."""
        try:
            query = (
                select(Document)
                .where(Document.profile_id == profile_id)
                .order_by(Document.created_at.desc())
                .offset(skip)
                .limit(limit)
            )
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("listing", e)
