"""
Repository Dependency Analysis Service

Runs the per-repository pipeline:
load -> fetch manifest -> parse -> replace dependency rows -> resolve versions
-> audit -> persist audit and advisories -> aggregate status.

Repositories are processed strictly in order. A repository that fails at any
stage is logged and skipped; the batch always runs to the end.
"""
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.constants import SeverityLevel, UNKNOWN_VERSION
from app.core.exceptions import ProviderError
from app.core.logging import logger
from app.db.base import utcnow
from app.db.repositories.audit_repository import AuditRepository
from app.db.repositories.dependency_repository import DependencyRepository
from app.db.repositories.repository_repository import RepositoryRepository
from app.providers.provider_factory import RepositoryHostClient
from app.scanners.manifest_parser import clean_version, parse_dependencies
from app.scanners.npm_audit import AuditReport, VulnerabilityAuditor
from app.scanners.status import determine_status
from app.scanners.version_resolver import VersionResolver, calculate_recommended_version

# Advisories of these severities link to their own bucket; anything else goes to "low"
OWN_BUCKET_SEVERITIES = {
    SeverityLevel.MODERATE.value,
    SeverityLevel.HIGH.value,
    SeverityLevel.CRITICAL.value,
}


class AnalysisService:
    """
    Service layer for dependency analysis of persisted repositories.

    Collaborators are injected so the registry, the audit API and the hosting
    provider can be replaced in tests.
    """

    def __init__(
        self,
        session: AsyncSession,
        provider: RepositoryHostClient,
        resolver: Optional[VersionResolver] = None,
        auditor: Optional[VulnerabilityAuditor] = None,
        manifest_path: Optional[str] = None,
    ):
        self.session = session
        self.provider = provider
        self.resolver = resolver or VersionResolver()
        self.auditor = auditor or VulnerabilityAuditor()
        self.manifest_path = manifest_path or settings.MANIFEST_PATH

        self.repositories = RepositoryRepository(session)
        self.dependencies = DependencyRepository(session)
        self.audits = AuditRepository(session)

    async def analyze_repositories(self, repository_ids: Iterable[UUID]) -> int:
        """
        Analyze each repository in order.

        Returns:
            Number of repositories analyzed successfully. Failures are only
            logged.
        """
        analyzed = 0

        for repository_id in repository_ids:
            try:
                if await self.analyze_repository(repository_id):
                    analyzed += 1
            except Exception:
                logger.exception(
                    f"Error analyzing repository {repository_id}",
                    extra={"repository_id": repository_id},
                )
                # Expires every instance held by the session, callers included
                await self.session.rollback()

        return analyzed

    async def analyze_repository(self, repository_id: UUID) -> bool:
        """
        Run the pipeline for one repository.

        Returns False when the repository is skipped before any row is
        touched (unknown id, manifest missing). Later failures raise.
        """
        repo = await self.repositories.get(repository_id)
        if not repo:
            logger.warning(f"Repository {repository_id} not found", extra={"repository_id": repository_id})
            return False

        owner, repo_name = repo.owner_and_name

        try:
            manifest = await self.provider.get_file(owner, repo_name, self.manifest_path)
        except ProviderError:
            logger.warning(
                f"No {self.manifest_path} found in {repo.full_name}",
                extra={"repository_id": repository_id},
            )
            return False

        declared = parse_dependencies(manifest)

        # Previous results are dropped only once the new manifest is known good
        await self.dependencies.delete_for_repository(repository_id)
        await self.audits.delete_for_repository(repository_id)

        entries = await self.resolve_dependencies(repository_id, declared)
        await self.dependencies.create_many(entries)

        report = await self.auditor.audit(declared)

        run_at = utcnow()
        await self.persist_audit(repository_id, run_at, report)

        status = determine_status(report.counts)
        await self.repositories.update(repository_id, {
            "status": status,
            "last_analyzed": run_at,
        })

        logger.info(
            f"Analyzed {repo.full_name}: {len(entries)} dependencies, status {status}",
            extra={"repository_id": repository_id},
        )
        return True

    async def resolve_dependencies(
        self,
        repository_id: UUID,
        declared: Dict[str, str],
    ) -> List[Dict[str, Any]]:
        """Build the replacement Dependency rows, one registry lookup at a time"""
        entries = []

        for package_name, declared_range in declared.items():
            current_version = clean_version(str(declared_range))
            latest_version = await self.resolver.get_latest_version(package_name)
            recommended_version = (
                calculate_recommended_version(latest_version) if latest_version else None
            )

            entries.append({
                "repository_id": repository_id,
                "package_name": package_name,
                "current_version": current_version,
                "latest_version": latest_version or UNKNOWN_VERSION,
                "recommended_version": recommended_version or current_version,
                "vulnerabilities": 0,
            })

        return entries

    async def persist_audit(self, repository_id: UUID, run_at: datetime, report: AuditReport) -> None:
        """
        Store one bucket row per severity, then advisories and actions.

        Advisories find their bucket by (repository, run_at) rather than by
        insert order. An action is copied onto every advisory row of this run
        for the same module.
        """
        await self.audits.create_many([
            {
                "repository_id": repository_id,
                "severity": bucket.severity,
                "count": bucket.count,
                "timestamp": run_at,
            }
            for bucket in report.counts
        ])

        if not report.detailed_advisories:
            return

        buckets = await self.audits.get_by_run(repository_id, run_at)
        advisory_ids_by_module: Dict[str, List[UUID]] = defaultdict(list)

        for advisory in report.detailed_advisories:
            if advisory.severity in OWN_BUCKET_SEVERITIES:
                bucket = buckets.get(advisory.severity)
            else:
                bucket = buckets.get(SeverityLevel.LOW.value)
            if bucket is None:
                continue

            row = await self.audits.create_advisory(
                {
                    "audit_result_id": bucket.id,
                    "package_name": advisory.module_name or "",
                    "advisory_id": advisory.id,
                    "title": advisory.title,
                    "severity": advisory.severity,
                    "vulnerable_versions": advisory.vulnerable_versions,
                    "recommendation": advisory.recommendation,
                    "url": advisory.url,
                    "cves": advisory.cves,
                    "cvss_score": advisory.cvss_score or 0,
                },
                [{"version": f.version, "paths": f.paths} for f in advisory.findings],
            )
            advisory_ids_by_module[advisory.module_name].append(row.id)

        actions = []
        for action in report.recommended_actions or []:
            for advisory_id in advisory_ids_by_module.get(action.module, []):
                actions.append({
                    "advisory_id": advisory_id,
                    "action": action.action,
                    "module": action.module,
                    "target": action.target,
                    "is_major": action.is_major,
                    "resolves": action.resolves,
                })

        await self.audits.create_actions(actions)
