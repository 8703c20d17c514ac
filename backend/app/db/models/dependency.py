# backend/app/db/models/dependency.py
"""Database models for dependency tracking"""

from sqlalchemy import Column, String, ForeignKey, Integer, Uuid
from sqlalchemy.orm import relationship
import uuid

from app.db.base import BaseModel


class Dependency(BaseModel):
    """One manifest-declared package of a repository, as of the latest analysis"""
    __tablename__ = "dependencies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    repository_id = Column(Uuid, ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False, index=True)

    package_name = Column(String(255), nullable=False, index=True)
    current_version = Column(String(100), nullable=False)  # range markers stripped
    latest_version = Column(String(100), nullable=False)  # "unknown" if the lookup failed
    recommended_version = Column(String(100), nullable=False)
    vulnerabilities = Column(Integer, default=0, nullable=False)

    repository = relationship("Repository", back_populates="dependencies")
