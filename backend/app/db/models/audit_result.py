# backend/app/db/models/audit_result.py
from sqlalchemy import Column, String, ForeignKey, Integer, DateTime, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
import uuid

from app.db.base import BaseModel


class AuditResult(BaseModel):
    """
    Vulnerability count for one severity bucket of one analysis run.

    All rows written by the same run share the same timestamp, which is how
    advisories find their bucket row after insert.
    """
    __tablename__ = "audit_results"
    __table_args__ = (
        CheckConstraint(
            "severity IN ('info', 'low', 'moderate', 'high', 'critical')",
            name="audit_results_severity_check",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    repository_id = Column(Uuid, ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False, index=True)

    severity = Column(String(20), nullable=False)
    count = Column(Integer, nullable=False, default=0)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)

    repository = relationship("Repository", back_populates="audit_results")
    advisories = relationship("SecurityAdvisory", back_populates="audit_result", cascade="all, delete-orphan")
