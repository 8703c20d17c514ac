# backend/app/db/repositories/audit_repository.py
from datetime import datetime
from typing import Dict, List, Sequence
from uuid import UUID
from sqlalchemy import select, delete, and_
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.audit_result import AuditResult
from app.db.models.advisory import SecurityAdvisory, AdvisoryFinding, AdvisoryAction
from app.db.repositories.base import BaseRepository


class AuditRepository(BaseRepository[AuditResult]):
    """Repository for AuditResult rows and the advisory records below them"""

    def __init__(self, session: AsyncSession):
        super().__init__(AuditResult, session)

    async def delete_for_repository(self, repository_id: UUID) -> int:
        """Delete a repository's audit results together with their advisories, findings and actions"""
        audit_ids = select(AuditResult.id).where(AuditResult.repository_id == repository_id)
        advisory_ids = select(SecurityAdvisory.id).where(SecurityAdvisory.audit_result_id.in_(audit_ids))

        for stmt in (
            delete(AdvisoryFinding).where(AdvisoryFinding.advisory_id.in_(advisory_ids)),
            delete(AdvisoryAction).where(AdvisoryAction.advisory_id.in_(advisory_ids)),
            delete(SecurityAdvisory).where(SecurityAdvisory.audit_result_id.in_(audit_ids)),
        ):
            await self.session.execute(stmt.execution_options(synchronize_session=False))

        result = await self.session.execute(
            delete(AuditResult)
            .where(AuditResult.repository_id == repository_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount

    async def get_by_run(self, repository_id: UUID, run_at: datetime) -> Dict[str, AuditResult]:
        """Bucket rows written by one analysis run, keyed by severity"""
        result = await self.session.execute(
            select(AuditResult).where(
                and_(
                    AuditResult.repository_id == repository_id,
                    AuditResult.timestamp == run_at
                )
            )
        )
        return {row.severity: row for row in result.scalars().all()}

    async def get_latest_with_advisories(self, repository_id: UUID) -> List[AuditResult]:
        """Audit rows of a repository with advisories, findings and actions loaded"""
        result = await self.session.execute(
            select(AuditResult)
            .where(AuditResult.repository_id == repository_id)
            .options(
                selectinload(AuditResult.advisories).selectinload(SecurityAdvisory.findings),
                selectinload(AuditResult.advisories).selectinload(SecurityAdvisory.actions),
            )
            .order_by(AuditResult.timestamp.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().unique().all())

    async def create_advisory(self, advisory_in: dict, findings_in: Sequence[dict]) -> SecurityAdvisory:
        advisory = SecurityAdvisory(**advisory_in)
        self.session.add(advisory)
        await self.session.flush()

        for finding_in in findings_in:
            self.session.add(AdvisoryFinding(advisory_id=advisory.id, **finding_in))

        await self.session.commit()
        return advisory

    async def create_actions(self, actions_in: Sequence[dict]) -> List[AdvisoryAction]:
        actions = [AdvisoryAction(**action_in) for action_in in actions_in]
        if actions:
            self.session.add_all(actions)
            await self.session.commit()
        return actions
