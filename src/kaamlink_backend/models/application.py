"""Application model linking a worker to a job."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.custom_types import GUID


class ApplicationStatus(str, Enum):
    """Application statuses."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Application(Base):
    """A worker's interest in a job, decided by the job's contractor."""

    __tablename__ = "applications"

    id = Column(GUID(), primary_key=True, default=uuid4)
    worker_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False, index=True)
    contractor_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False, index=True)
    job_id = Column(GUID(), ForeignKey("jobs.id"), nullable=False, index=True)
    status = Column(String(20), default=ApplicationStatus.PENDING.value, nullable=False)
    offered_wage = Column(Numeric(10, 2), nullable=True)
    contractor_wage = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    job = relationship("Job", back_populates="applications")

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, worker_id={self.worker_id}, status='{self.status}')>"

    @property
    def is_accepted(self) -> bool:
        return self.status == ApplicationStatus.ACCEPTED.value

    @property
    def shift_key(self) -> tuple:
        """The (job, contractor, worker) triple shift logs are scoped to."""
        return (self.job_id, self.contractor_id, self.worker_id)
