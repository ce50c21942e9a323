"""Base repository with common CRUD operations."""

from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations.

    Subclasses must set:
    - model: The SQLAlchemy model class
    - order_by_field: Field to use for ordering in list_all() (default: "created_at")

    Repositories flush but never commit; the caller owns the transaction.
    """

    model: type[T]  # Set by subclasses
    order_by_field: str = "created_at"  # Field for ordering, newest first

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, id: str) -> T | None:
        """Get entity by ID.

        Args:
            id: Internal UUID

        Returns:
            Entity or None
        """
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def list_all(self, limit: int | None = None, **filters) -> list[T]:
        """List entities, newest first, with optional equality filters.

        Args:
            limit: Max results (None for all)
            **filters: Column filters as keyword arguments

        Returns:
            List of entities
        """
        query = select(self.model)

        for key, value in filters.items():
            if value is not None and hasattr(self.model, key):
                query = query.where(getattr(self.model, key) == value)

        order_by_attr = getattr(self.model, self.order_by_field, None)
        if order_by_attr is not None:
            query = query.order_by(order_by_attr.desc())

        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self, **filters) -> int:
        """Count entities, optionally with filters.

        Args:
            **filters: Optional filters as keyword arguments

        Returns:
            Count of entities
        """
        query = select(func.count(self.model.id))

        for key, value in filters.items():
            if value is not None and hasattr(self.model, key):
                query = query.where(getattr(self.model, key) == value)

        result = await self.session.execute(query)
        return result.scalar() or 0

    async def delete(self, id: str) -> bool:
        """Delete an entity by ID.

        Dependent rows go with it through ON DELETE CASCADE.

        Returns:
            True if found and deleted
        """
        entity = await self.get_by_id(id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.flush()
        return True
