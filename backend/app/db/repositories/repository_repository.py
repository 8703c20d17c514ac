# backend/app/db/repositories/repository_repository.py
from typing import Any, Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.repository import Repository
from app.db.repositories.base import BaseRepository


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for source Repository records"""

    def __init__(self, session: AsyncSession):
        super().__init__(Repository, session)

    async def get_by_full_name(self, full_name: str) -> Optional[Repository]:
        result = await self.session.execute(
            select(Repository).where(Repository.full_name == full_name)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Repository]:
        result = await self.session.execute(
            select(Repository).order_by(Repository.full_name)
        )
        return list(result.scalars().all())

    async def upsert_from_provider(self, listing: Dict[str, Any]) -> Repository:
        """Insert a discovered repository, or refresh the existing row in place"""
        existing = await self.get_by_full_name(listing["fullName"])
        values = {
            "name": listing["name"],
            "url": listing.get("url"),
            "provider": listing.get("provider", "github"),
            "default_branch": listing.get("defaultBranch"),
        }

        if existing is None:
            return await self.create({
                "full_name": listing["fullName"],
                "status": None,
                "last_analyzed": None,
                **values,
            })

        return await self.update(existing.id, values)
