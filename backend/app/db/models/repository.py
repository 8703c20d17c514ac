# backend/app/db/models/repository.py
from sqlalchemy import Column, String, DateTime, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
import uuid

from app.db.base import BaseModel


class Repository(BaseModel):
    """
    A source repository discovered from the hosting provider.

    Unique on full_name ("owner/name"). status stays NULL until the first
    analysis and is one of green, yellow, red afterwards.
    """
    __tablename__ = "repositories"
    __table_args__ = (
        CheckConstraint(
            "status IS NULL OR status IN ('green', 'yellow', 'red')",
            name="repositories_status_check",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    full_name = Column(String(500), nullable=False, unique=True, index=True)
    url = Column(String(1000), nullable=True)
    provider = Column(String(50), nullable=False, default="github")
    default_branch = Column(String(255), nullable=True)

    status = Column(String(10), nullable=True, index=True)
    last_analyzed = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    dependencies = relationship("Dependency", back_populates="repository", cascade="all, delete-orphan")
    audit_results = relationship("AuditResult", back_populates="repository", cascade="all, delete-orphan")

    @property
    def owner_and_name(self):
        owner, _, name = self.full_name.partition("/")
        return owner, name
