"""One-time codes that gate the start and end of a shift."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Index

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.custom_types import GUID


class OtpType(str, Enum):
    """Which shift transition a code unlocks."""
    START = "start"
    END = "end"


class ShiftOtp(Base):
    """A six-digit code issued to a worker and relayed by the contractor."""

    __tablename__ = "shift_otps"

    id = Column(GUID(), primary_key=True, default=uuid4)
    application_id = Column(GUID(), ForeignKey("applications.id"), nullable=False)
    contractor_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False)
    worker_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False)
    job_id = Column(GUID(), ForeignKey("jobs.id"), nullable=False)
    code = Column(String(6), nullable=False)
    type = Column(String(10), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_shift_otps_lookup", "application_id", "type", "used"),
        Index("idx_shift_otps_contractor_pending", "contractor_id", "used"),
    )

    def __repr__(self) -> str:
        return f"<ShiftOtp(id={self.id}, application_id={self.application_id}, type='{self.type}', used={self.used})>"
