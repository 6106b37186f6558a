"""Shift log model: one physical work session."""

from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, text

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.custom_types import GUID


class ShiftStatus(str, Enum):
    """Shift log statuses. No row at all means the shift never started."""
    ONGOING = "ongoing"
    COMPLETED = "completed"


class ShiftLog(Base):
    """A work session opened by a start OTP and closed by an end OTP."""

    __tablename__ = "shift_logs"

    id = Column(GUID(), primary_key=True, default=uuid4)
    worker_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False)
    contractor_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False)
    job_id = Column(GUID(), ForeignKey("jobs.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    status = Column(String(20), default=ShiftStatus.ONGOING.value, nullable=False)

    __table_args__ = (
        # At most one ongoing shift per (job, contractor, worker)
        Index(
            "uq_shift_logs_one_ongoing",
            "job_id", "contractor_id", "worker_id",
            unique=True,
            postgresql_where=text("status = 'ongoing'"),
            sqlite_where=text("status = 'ongoing'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<ShiftLog(id={self.id}, job_id={self.job_id}, status='{self.status}')>"

    @property
    def is_completed(self) -> bool:
        return self.status == ShiftStatus.COMPLETED.value
