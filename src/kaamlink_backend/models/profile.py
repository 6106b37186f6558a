"""Profile model for workers and contractors."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Numeric

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.custom_types import GUID


class ProfileRole(str, Enum):
    """Which side of the marketplace a profile is on."""
    WORKER = "worker"
    CONTRACTOR = "contractor"


class Profile(Base):
    """Profile keyed by the auth provider's user id."""

    __tablename__ = "profiles"

    user_id = Column(GUID(), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    skill = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    wage = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Profile(user_id={self.user_id}, role='{self.role}')>"

    @property
    def is_contractor(self) -> bool:
        return self.role == ProfileRole.CONTRACTOR.value
