# backend/app/db/repositories/base.py
from typing import Any, Generic, TypeVar, Type, Optional, List, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations.

    Every write commits immediately; a multi-step sequence built from these
    calls is therefore not atomic.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get by ID"""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, obj_in: dict) -> ModelType:
        """Create new record"""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def create_many(self, objs_in: Sequence[dict]) -> List[ModelType]:
        """Create several records in one commit"""
        db_objs = [self.model(**obj_in) for obj_in in objs_in]
        if not db_objs:
            return []
        self.session.add_all(db_objs)
        await self.session.commit()
        return db_objs

    async def update(self, id: Any, obj_in: dict) -> Optional[ModelType]:
        """Update record"""
        await self.session.execute(
            update(self.model).where(self.model.id == id).values(**obj_in)
        )
        await self.session.commit()
        return await self.get(id)

    async def delete_where(self, **filters: Any) -> int:
        """Delete every record matching the equality filters"""
        stmt = delete(self.model)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model, key) == value)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount
