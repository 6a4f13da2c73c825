"""
Base repository with common CRUD operations.
"""

from typing import TypeVar, Generic, Type
from sqlalchemy import Select, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.config import ValidationSettings
from rolegate.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Base repository providing common CRUD operations.

    Repositories never commit; the caller owns the transaction. ``limits``
    bounds the input of repositories that validate before writing.

    Usage:
        class RoleRepository(BaseRepository[Role]):
            model = Role

        repo = RoleRepository(db)
        role = await repo.get_one(name="admin")
    """

    model: Type[ModelT]

    def __init__(self, db: AsyncSession, limits: ValidationSettings | None = None):
        self.db = db
        self.limits = limits

    def _base_query(self) -> Select:
        """Base query - override to add default filters."""
        return select(self.model)

    async def get_by_id(self, id: int) -> ModelT | None:
        """Get entity by ID."""
        stmt = self._base_query().where(self.model.id == id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_one(self, **filters) -> ModelT | None:
        """Get single entity by filters."""
        stmt = self._base_query()
        for field, value in filters.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, **filters) -> bool:
        """Check if entity exists."""
        stmt = select(func.count()).select_from(self.model)
        for field, value in filters.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        count = await self.db.scalar(stmt)
        return (count or 0) > 0

    async def create(self, **data) -> ModelT:
        """Create new entity."""
        entity = self.model(**data)
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity
