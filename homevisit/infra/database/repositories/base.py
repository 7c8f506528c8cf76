"""Generic async repository for SQLAlchemy 2.0."""
from __future__ import annotations

from typing import Any, ClassVar, Generic, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: ClassVar[type]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        return await self.session.get(self.model, id)  # type: ignore[return-value]

    async def _all(self, stmt: Select[Any]) -> List[Any]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _first(self, stmt: Select[Any]) -> Optional[Any]:
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def _count(self, stmt: Select[Any]) -> int:
        wrapped = select(func.count()).select_from(stmt.subquery())
        result = await self.session.execute(wrapped)
        return int(result.scalar_one())
