# backend/app/remediation/upgrade.py
"""
Package upgrade remediation

Rewrites manifest version pins for selected dependencies to their
recommended versions and commits the result through the hosting provider.
"""
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFound
from app.core.logging import logger
from app.db.repositories.dependency_repository import DependencyRepository
from app.db.repositories.repository_repository import RepositoryRepository
from app.providers.provider_factory import RepositoryHostClient
from app.scanners.manifest_parser import load_manifest, serialize_manifest

NO_CHANGES_MESSAGE = "No packages were updated"


def apply_upgrades(manifest: Dict[str, Any], upgrades: Dict[str, str]) -> int:
    """
    Pin each package to ^<version> in whichever section declares it.

    dependencies is checked before devDependencies. Names declared in
    neither section are ignored.

    Returns:
        Number of packages rewritten
    """
    updated = 0

    for package_name, version in upgrades.items():
        for section in ("dependencies", "devDependencies"):
            declared = manifest.get(section)
            if isinstance(declared, dict) and package_name in declared:
                declared[package_name] = f"^{version}"
                updated += 1
                break

    return updated


def commit_message(count: int) -> str:
    return f"chore: upgrade {count} package(s) to recommended versions"


class UpgradeService:
    """Applies recommended versions to a repository's manifest"""

    def __init__(
        self,
        session: AsyncSession,
        provider: RepositoryHostClient,
        manifest_path: Optional[str] = None,
        branch: Optional[str] = None,
    ):
        self.provider = provider
        self.manifest_path = manifest_path or settings.MANIFEST_PATH
        self.branch = branch or settings.UPGRADE_BRANCH

        self.repositories = RepositoryRepository(session)
        self.dependencies = DependencyRepository(session)

    async def upgrade_packages(self, repository_id: UUID, package_names: Iterable[str]) -> Dict[str, Any]:
        repo = await self.repositories.get(repository_id)
        if not repo:
            raise NotFound("Repository not found")

        owner, repo_name = repo.owner_and_name

        manifest = load_manifest(
            await self.provider.get_file(owner, repo_name, self.manifest_path)
        )

        rows = await self.dependencies.get_by_packages(repository_id, package_names)
        upgrades = {row.package_name: row.recommended_version for row in rows}

        updated = apply_upgrades(manifest, upgrades)
        if updated == 0:
            return {
                "success": False,
                "message": NO_CHANGES_MESSAGE,
                "commitUrl": None,
            }

        if repo.default_branch and repo.default_branch != self.branch:
            # TODO: commit to repo.default_branch once the upgrade branch is configurable per repository
            logger.warning(
                f"Committing upgrades for {repo.full_name} to '{self.branch}' "
                f"but its default branch is '{repo.default_branch}'",
                extra={"repository_id": repository_id},
            )

        result = await self.provider.create_commit(
            owner,
            repo_name,
            self.branch,
            self.manifest_path,
            serialize_manifest(manifest),
            commit_message(updated),
        )

        logger.info(
            f"Upgraded {updated} package(s) in {repo.full_name}",
            extra={"repository_id": repository_id},
        )

        return {
            "success": result.get("success", True),
            "message": f"Successfully upgraded {updated} package(s)",
            "commitUrl": result.get("commitUrl"),
        }
