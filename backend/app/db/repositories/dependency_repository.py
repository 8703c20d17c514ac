# backend/app/db/repositories/dependency_repository.py
from typing import Iterable, List
from uuid import UUID
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.dependency import Dependency
from app.db.repositories.base import BaseRepository


class DependencyRepository(BaseRepository[Dependency]):
    """Repository for Dependency operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(Dependency, session)

    async def get_by_repository(self, repository_id: UUID) -> List[Dependency]:
        result = await self.session.execute(
            select(Dependency)
            .where(Dependency.repository_id == repository_id)
            .order_by(Dependency.package_name)
        )
        return list(result.scalars().all())

    async def get_by_packages(
        self,
        repository_id: UUID,
        package_names: Iterable[str]
    ) -> List[Dependency]:
        """Get the persisted rows for exactly these package names"""
        result = await self.session.execute(
            select(Dependency).where(
                and_(
                    Dependency.repository_id == repository_id,
                    Dependency.package_name.in_(list(package_names))
                )
            )
        )
        return list(result.scalars().all())

    async def delete_for_repository(self, repository_id: UUID) -> int:
        return await self.delete_where(repository_id=repository_id)
