"""Job board service."""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.error_handling import NotFound, ValidationError
from kaamlink_backend.models.job import Job
from kaamlink_backend.models.shift_log import ShiftStatus
from kaamlink_backend.repositories.job import JobRepository
from kaamlink_backend.repositories.profile import ProfileRepository
from kaamlink_backend.repositories.shift_log import ShiftLogRepository

logger = structlog.get_logger(__name__)


class JobService:
    """Posting jobs and listing the ones still open to workers."""

    def __init__(self):
        self.repository = JobRepository()
        self.profiles = ProfileRepository()
        self.shift_logs = ShiftLogRepository()

    def create_job(
        self,
        db: Session,
        contractor_id: UUID,
        title: str,
        description: Optional[str] = None,
        location: Optional[str] = None,
        wage: Optional[Decimal] = None
    ) -> Job:
        """Post a job as a contractor."""
        if not title or not title.strip():
            raise ValidationError("Title is required", field="title")
        if wage is not None and wage <= 0:
            raise ValidationError("Wage must be greater than zero", field="wage", value=wage)

        contractor = self.profiles.get_by_id(db, contractor_id)
        if contractor is None:
            raise NotFound(f"Profile {contractor_id} not found", resource="profile")
        if not contractor.is_contractor:
            raise ValidationError("Only contractors can post jobs", field="role", value=contractor.role)

        job = self.repository.create_with_audit(
            db,
            actor_id=contractor_id,
            contractor_id=contractor_id,
            title=title.strip(),
            description=description,
            location=location,
            wage=wage,
        )
        logger.info("Job posted", job_id=str(job.id), contractor_id=str(contractor_id))
        return job

    def available_jobs(self, db: Session) -> List[Job]:
        """Jobs newest first, without the ones whose shifts have all completed.

        A job with no shift logs has not started yet; a job with an ongoing
        shift is still active. Both stay listed.
        """
        jobs = self.repository.get_all_newest_first(db)
        statuses_by_job = self.shift_logs.get_statuses_by_job(db, [j.id for j in jobs])

        return [
            job for job in jobs
            if not statuses_by_job.get(job.id)
            or ShiftStatus.ONGOING.value in statuses_by_job[job.id]
        ]
