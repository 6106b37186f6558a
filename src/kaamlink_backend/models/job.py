"""Job posting model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.custom_types import GUID


class Job(Base):
    """A unit of work posted by a contractor."""

    __tablename__ = "jobs"

    id = Column(GUID(), primary_key=True, default=uuid4)
    contractor_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    wage = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    applications = relationship("Application", back_populates="job")

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title='{self.title}')>"
