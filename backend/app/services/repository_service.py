"""
Repository Service

The three operations exposed to the API layer:
- fetch_repositories: discover repositories from the hosting provider
- analyze_repositories: run dependency analysis over a batch
- upgrade_packages: commit recommended versions for selected packages
"""
from typing import Any, Callable, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BadRequest, Unauthenticated
from app.core.logging import logger
from app.db.repositories.repository_repository import RepositoryRepository
from app.providers.provider_factory import RepositoryHostClient, get_provider
from app.remediation.upgrade import UpgradeService
from app.services.analysis_service import AnalysisService

MISSING_TOKEN_MESSAGE = "GitHub token not configured. Please set GITHUB_TOKEN environment variable."


class RepositoryService:

    def __init__(
        self,
        session: AsyncSession,
        provider_factory: Callable[[str, str], RepositoryHostClient] = get_provider,
        analysis_options: Optional[Dict[str, Any]] = None,
    ):
        self.session = session
        self.provider_factory = provider_factory
        self.analysis_options = analysis_options or {}
        self.repositories = RepositoryRepository(session)

    def _provider(self) -> RepositoryHostClient:
        token = settings.GITHUB_TOKEN
        if not token:
            raise Unauthenticated(MISSING_TOKEN_MESSAGE)
        return self.provider_factory(settings.GIT_PROVIDER, token)

    async def fetch_repositories(self) -> List[Dict[str, Any]]:
        """List repositories from the provider and upsert them by full name"""
        provider = self._provider()
        repos = await provider.list_repos()

        for repo in repos:
            await self.repositories.upsert_from_provider(repo)

        logger.info(f"Fetched {len(repos)} repositories from {settings.GIT_PROVIDER}")
        return repos

    async def analyze_repositories(self, repository_ids: Optional[Sequence[UUID]]) -> Dict[str, Any]:
        """Analyze a batch; per-repository failures only lower the count"""
        provider = self._provider()

        if not repository_ids:
            raise BadRequest("No repositories selected for analysis")

        service = AnalysisService(self.session, provider, **self.analysis_options)
        analyzed = await service.analyze_repositories(repository_ids)

        message = f"Successfully analyzed {analyzed} out of {len(repository_ids)} repositories"
        logger.info(message)
        return {"success": True, "message": message}

    async def upgrade_packages(
        self,
        repository_id: Optional[UUID],
        package_names: Optional[Sequence[str]],
    ) -> Dict[str, Any]:
        provider = self._provider()

        if not repository_id:
            raise BadRequest("Repository ID is required")

        if not package_names:
            raise BadRequest("No packages selected for upgrade")

        service = UpgradeService(self.session, provider)
        return await service.upgrade_packages(repository_id, package_names)


def get_repository_service(session: AsyncSession) -> RepositoryService:
    return RepositoryService(session)
