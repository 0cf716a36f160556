"""Repository for profile records."""

from sqlalchemy.ext.asyncio import AsyncSession

from grantflow.database.models import Profile
from grantflow.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Profiles are created elsewhere; document ingestion only reads and backfills them."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Profile)
