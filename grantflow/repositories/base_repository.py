"""Generic async CRUD repository."""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grantflow.core.exceptions import DatabaseError
from grantflow.database.models import utcnow
from grantflow.utils.logging import get_logger

# Define a generic type for SQLAlchemy models
ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing common CRUD operations.

    Writes commit immediately. A failed write rolls the session back and is
    re-raised as ``DatabaseError`` with the driver error attached.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field):
                    query = query.where(getattr(self.model, field) == value)
        return query

    async def _fail(self, action: str, error: SQLAlchemyError, rollback: bool = False):
        self.logger.error(
            f"Error {action} {self.model.__name__}: {str(error)}",
            exc_info=True,
            extra={"model": self.model.__name__},
        )
        if rollback:
            await self.session.rollback()
        raise DatabaseError(f"Error {action} {self.model.__name__}", original_error=error)

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a record by its ID.

        Args:
            id: The UUID of the record

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._fail("retrieving", e)

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 200,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[ModelType]:
        """Get all records with optional pagination and filtering.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            filters: Dictionary of field_name: value to filter by

        Returns:
            List of records
        """
        try:
            query = self._apply_filters(select(self.model), filters)
            query = query.offset(skip).limit(limit)
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("listing", e)

    async def create(self, **kwargs) -> ModelType:
        """Create and commit a new record."""
        try:
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            await self.session.commit()
            return instance
        except SQLAlchemyError as e:
            await self._fail("creating", e, rollback=True)

    async def update(self, id: UUID, **kwargs) -> Optional[ModelType]:
        """Update an existing record and bump ``updated_at``.

        Args:
            id: The UUID of the record to update
            **kwargs: Fields and values to update

        Returns:
            The updated record if found, None otherwise
        """
        instance = await self.get_by_id(id)
        if not instance:
            return None

        try:
            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)

            if hasattr(instance, "updated_at"):
                instance.updated_at = utcnow()

            await self.session.flush()
            await self.session.commit()
            return instance
        except SQLAlchemyError as e:
            await self._fail("updating", e, rollback=True)

    async def delete(self, id: UUID) -> bool:
        """Delete a record by ID. Returns False if it does not exist."""
        instance = await self.get_by_id(id)
        if not instance:
            return False

        try:
            await self.session.delete(instance)
            await self.session.flush()
            await self.session.commit()
            return True
        except SQLAlchemyError as e:
            await self._fail("deleting", e, rollback=True)

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        try:
            query = self._apply_filters(select(func.count()).select_from(self.model), filters)
            result = await self.session.execute(query)
            return result.scalar_one()
        except SQLAlchemyError as e:
            await self._fail("counting", e)
