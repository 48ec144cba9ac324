"""
Base repository.

Generic CRUD operations for all repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with generic CRUD operations.

    Provides async database operations for any SQLAlchemy model.
    Repositories only flush; committing is the service's job.
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def get_by_id(
        self, id: int, for_update: bool = False
    ) -> ModelType | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID
            for_update: Lock the row with SELECT ... FOR UPDATE

        Returns:
            Entity or None if not found
        """
        if not for_update:
            return await self.session.get(self.model, id)

        stmt = select(self.model).where(self.model.id == id).with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by(self, **filters: Any) -> list[ModelType]:
        """
        Find entities by filters, ordered by primary key.

        Args:
            **filters: Column filters

        Returns:
            List of matching entities
        """
        stmt = select(self.model).filter_by(**filters).order_by(self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **data: Any) -> ModelType:
        """
        Create new entity.

        Args:
            **data: Entity data

        Returns:
            Created entity
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, id: int, **data: Any) -> ModelType | None:
        """
        Update entity by ID.

        Args:
            id: Entity ID
            **data: Updated data

        Returns:
            Updated entity or None if not found
        """
        entity = await self.get_by_id(id)
        if not entity:
            return None

        for key, value in data.items():
            setattr(entity, key, value)

        await self.session.flush()
        return entity

    async def count(self, **filters: Any) -> int:
        """
        Count entities matching filters.

        Args:
            **filters: Column filters

        Returns:
            Count of matching entities
        """
        stmt = select(func.count()).select_from(self.model)

        if filters:
            stmt = stmt.filter_by(**filters)

        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, **filters: Any) -> bool:
        """
        Check if entity exists.

        Args:
            **filters: Column filters

        Returns:
            True if exists, False otherwise
        """
        return await self.count(**filters) > 0
