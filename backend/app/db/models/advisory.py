# backend/app/db/models/advisory.py
"""Advisory detail records hanging off an audit result bucket"""

from sqlalchemy import Column, String, ForeignKey, Text, Boolean, JSON, Float, Uuid
from sqlalchemy.orm import relationship
import uuid

from app.db.base import BaseModel


class SecurityAdvisory(BaseModel):
    __tablename__ = "security_advisories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    audit_result_id = Column(Uuid, ForeignKey("audit_results.id", ondelete="CASCADE"), nullable=False, index=True)

    package_name = Column(String(255), nullable=False, index=True)
    advisory_id = Column(String(100), nullable=False)
    title = Column(String(500), nullable=True)
    severity = Column(String(20), nullable=True)
    vulnerable_versions = Column(String(255), nullable=True)
    recommendation = Column(Text, nullable=True)
    url = Column(String(1000), nullable=True)
    cves = Column(JSON, default=list, nullable=False)
    cvss_score = Column(Float, default=0, nullable=False)

    audit_result = relationship("AuditResult", back_populates="advisories")
    findings = relationship("AdvisoryFinding", back_populates="advisory", cascade="all, delete-orphan")
    actions = relationship("AdvisoryAction", back_populates="advisory", cascade="all, delete-orphan")


class AdvisoryFinding(BaseModel):
    __tablename__ = "advisory_findings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    advisory_id = Column(Uuid, ForeignKey("security_advisories.id", ondelete="CASCADE"), nullable=False, index=True)

    version = Column(String(100), nullable=True)
    paths = Column(JSON, default=list, nullable=False)

    advisory = relationship("SecurityAdvisory", back_populates="findings")


class AdvisoryAction(BaseModel):
    __tablename__ = "advisory_actions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    advisory_id = Column(Uuid, ForeignKey("security_advisories.id", ondelete="CASCADE"), nullable=False, index=True)

    action = Column(String(50), nullable=True)  # install, update, review
    module = Column(String(255), nullable=True)
    target = Column(String(100), nullable=True)
    is_major = Column(Boolean, default=False, nullable=False)
    resolves = Column(JSON, default=list, nullable=False)  # resolved advisory ids

    advisory = relationship("SecurityAdvisory", back_populates="actions")
