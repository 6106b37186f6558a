"""Shift log repository for database operations."""

from typing import Dict, List, Optional, Iterable
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from kaamlink_backend.models.shift_log import ShiftLog, ShiftStatus
from .audited_base import AuditedRepository


class ShiftLogRepository(AuditedRepository[ShiftLog]):
    """Repository for ShiftLog model operations."""

    def __init__(self):
        super().__init__(ShiftLog)

    def _for_triple(self, db: Session, job_id: UUID, contractor_id: UUID, worker_id: UUID):
        return db.query(ShiftLog).filter(
            and_(
                ShiftLog.job_id == job_id,
                ShiftLog.contractor_id == contractor_id,
                ShiftLog.worker_id == worker_id,
            )
        )

    def get_latest(
        self,
        db: Session,
        job_id: UUID,
        contractor_id: UUID,
        worker_id: UUID
    ) -> Optional[ShiftLog]:
        """Latest shift (by start time) for a (job, contractor, worker) triple."""
        return (
            self._for_triple(db, job_id, contractor_id, worker_id)
            .order_by(ShiftLog.start_time.desc())
            .first()
        )

    def get_latest_ongoing(
        self,
        db: Session,
        job_id: UUID,
        contractor_id: UUID,
        worker_id: UUID
    ) -> Optional[ShiftLog]:
        """Ongoing shift with the latest start time for the triple, if any."""
        return (
            self._for_triple(db, job_id, contractor_id, worker_id)
            .filter(ShiftLog.status == ShiftStatus.ONGOING.value)
            .order_by(ShiftLog.start_time.desc())
            .first()
        )

    def get_statuses_by_job(self, db: Session, job_ids: Iterable[UUID]) -> Dict[UUID, List[str]]:
        """Map job id to the statuses of all its shift logs."""
        job_ids = list(job_ids)
        if not job_ids:
            return {}

        grouped: Dict[UUID, List[str]] = {}
        rows = db.query(ShiftLog.job_id, ShiftLog.status).filter(ShiftLog.job_id.in_(job_ids)).all()
        for job_id, status in rows:
            grouped.setdefault(job_id, []).append(status)
        return grouped
