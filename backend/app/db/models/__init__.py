# backend/app/db/models/__init__.py
from app.db.models.repository import Repository
from app.db.models.dependency import Dependency
from app.db.models.audit_result import AuditResult
from app.db.models.advisory import SecurityAdvisory, AdvisoryFinding, AdvisoryAction

__all__ = [
    "Repository",
    "Dependency",
    "AuditResult",
    "SecurityAdvisory",
    "AdvisoryFinding",
    "AdvisoryAction",
]
