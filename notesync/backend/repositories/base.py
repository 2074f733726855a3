"""
Base Repository.

Base class for all repositories with common persistence helpers.
Models here are addressed by natural keys, so lookups take a where clause
instead of a single id.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from notesync.backend.core.exceptions import NotFoundError
from notesync.backend.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the model class:

        class NoteRepository(BaseRepository[Note]):
            model = Note
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _one_or_none(self, *where: ColumnElement[bool]) -> ModelType | None:
        result = await self.session.execute(select(self.model).where(*where))
        return result.scalar_one_or_none()

    async def _one(self, *where: ColumnElement[bool]) -> ModelType:
        """
        Raises:
            NotFoundError: If no record matches
        """
        instance = await self._one_or_none(*where)
        if instance is None:
            raise NotFoundError(f"{self.model.__name__} not found")
        return instance

    async def _all(self, *where: ColumnElement[bool], order_by: Any = None) -> list[ModelType]:
        stmt = select(self.model).where(*where)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new record."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def _apply(self, instance: ModelType, **kwargs: Any) -> ModelType:
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def _remove(self, instance: ModelType) -> None:
        await self.session.delete(instance)
        await self.session.flush()
