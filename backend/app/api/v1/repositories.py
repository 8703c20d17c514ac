"""
Repository API

Endpoints:
- POST /api/v1/repositories/fetch
- POST /api/v1/repositories/analyze
- POST /api/v1/repositories/upgrade
- GET  /api/v1/repositories
- GET  /api/v1/repositories/{repository_id}
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NodeCheckError, NotFound
from app.core.logging import logger
from app.db.database import get_db
from app.db.repositories.audit_repository import AuditRepository
from app.db.repositories.dependency_repository import DependencyRepository
from app.db.repositories.repository_repository import RepositoryRepository
from app.schemas.repository import (
    ActionResult,
    AnalyzeRequest,
    AuditResultOut,
    DependencyOut,
    RepositoryDetail,
    RepositoryListing,
    RepositoryOut,
    UpgradeRequest,
    UpgradeResult,
)
from app.services.repository_service import RepositoryService, get_repository_service

router = APIRouter()


def get_service(db: AsyncSession = Depends(get_db)) -> RepositoryService:
    return get_repository_service(db)


def _to_http_error(e: Exception, action: str) -> HTTPException:
    """Caller errors keep their status; anything else is a 500 with the cause"""
    if isinstance(e, NodeCheckError) and e.status_code < 500:
        return HTTPException(status_code=e.status_code, detail=e.message)

    logger.error(f"Failed to {action}: {e}", exc_info=e)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {e}",
    )


@router.post("/fetch", response_model=List[RepositoryListing])
async def fetch_repositories(service: RepositoryService = Depends(get_service)):
    """Discover repositories visible to the configured credential."""
    try:
        return await service.fetch_repositories()
    except Exception as e:
        raise _to_http_error(e, "fetch repositories")


@router.post("/analyze", response_model=ActionResult)
async def analyze_repositories(
    request: AnalyzeRequest,
    service: RepositoryService = Depends(get_service),
):
    """
    Analyze the selected repositories in order.

    Always succeeds once started; the message reports how many of the
    requested repositories were analyzed.
    """
    try:
        return await service.analyze_repositories(request.repository_ids)
    except Exception as e:
        raise _to_http_error(e, "analyze repositories")


@router.post("/upgrade", response_model=UpgradeResult)
async def upgrade_packages(
    request: UpgradeRequest,
    service: RepositoryService = Depends(get_service),
):
    """Commit recommended versions for the selected packages."""
    try:
        return await service.upgrade_packages(request.repository_id, request.package_names)
    except Exception as e:
        raise _to_http_error(e, "upgrade packages")


@router.get("", response_model=List[RepositoryOut])
async def list_repositories(db: AsyncSession = Depends(get_db)):
    return await RepositoryRepository(db).list_all()


@router.get("/{repository_id}", response_model=RepositoryDetail)
async def get_repository(repository_id: UUID, db: AsyncSession = Depends(get_db)):
    repo = await RepositoryRepository(db).get(repository_id)
    if not repo:
        raise NotFound("Repository not found")

    dependencies = await DependencyRepository(db).get_by_repository(repository_id)
    audit_results = await AuditRepository(db).get_latest_with_advisories(repository_id)

    return RepositoryDetail(
        **RepositoryOut.model_validate(repo).model_dump(),
        dependencies=[DependencyOut.model_validate(d) for d in dependencies],
        audit_results=[AuditResultOut.model_validate(a) for a in audit_results],
    )
