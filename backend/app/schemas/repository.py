# backend/app/schemas/repository.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RepositoryListing(CamelModel):
    """Repository as reported by the hosting provider"""
    name: str
    full_name: str
    url: Optional[str] = None
    provider: str
    default_branch: Optional[str] = None


class AnalyzeRequest(CamelModel):
    repository_ids: Optional[List[UUID]] = None


class UpgradeRequest(CamelModel):
    repository_id: Optional[UUID] = None
    package_names: Optional[List[str]] = None


class ActionResult(CamelModel):
    success: bool
    message: str


class UpgradeResult(ActionResult):
    commit_url: Optional[str] = None


class RepositoryOut(CamelModel):
    id: UUID
    name: str
    full_name: str
    url: Optional[str] = None
    provider: str
    default_branch: Optional[str] = None
    status: Optional[str] = None
    last_analyzed: Optional[datetime] = None


class DependencyOut(CamelModel):
    id: UUID
    package_name: str
    current_version: str
    latest_version: str
    recommended_version: str
    vulnerabilities: int = 0


class AdvisoryFindingOut(CamelModel):
    version: Optional[str] = None
    paths: List[str] = []


class AdvisoryActionOut(CamelModel):
    action: Optional[str] = None
    module: Optional[str] = None
    target: Optional[str] = None
    is_major: bool = False
    resolves: List[str] = []


class SecurityAdvisoryOut(CamelModel):
    id: UUID
    package_name: str
    advisory_id: str
    title: Optional[str] = None
    severity: Optional[str] = None
    vulnerable_versions: Optional[str] = None
    recommendation: Optional[str] = None
    url: Optional[str] = None
    cves: List[str] = []
    cvss_score: float = 0
    findings: List[AdvisoryFindingOut] = []
    actions: List[AdvisoryActionOut] = []


class AuditResultOut(CamelModel):
    id: UUID
    severity: str
    count: int
    timestamp: datetime
    advisories: List[SecurityAdvisoryOut] = []


class RepositoryDetail(RepositoryOut):
    dependencies: List[DependencyOut] = []
    audit_results: List[AuditResultOut] = []
