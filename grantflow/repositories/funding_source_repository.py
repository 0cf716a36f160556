"""Repository for funding source records."""

from typing import Optional

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grantflow.database.models import FundingSource
from grantflow.repositories.base_repository import BaseRepository


class FundingSourceRepository(BaseRepository[FundingSource]):
    """Funding sources are upserted by exact name."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, FundingSource)

    async def get_by_name(self, name: str) -> Optional[FundingSource]:
        """Get a funding source by exact (case-sensitive) name."""
        try:
            query = select(FundingSource).where(FundingSource.name == name)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("retrieving", e)

    async def table_exists(self) -> bool:
        """Check whether the funding_sources table is present in the database."""
        table_name = FundingSource.__tablename__
        return await self.session.run_sync(
            lambda sync_session: inspect(sync_session.connection()).has_table(table_name)
        )
