"""Job repository for database operations."""

from typing import List

from sqlalchemy.orm import Session

from kaamlink_backend.models.job import Job
from .audited_base import AuditedRepository


class JobRepository(AuditedRepository[Job]):
    """Repository for Job model operations."""

    def __init__(self):
        super().__init__(Job)

    def get_all_newest_first(self, db: Session) -> List[Job]:
        return db.query(Job).order_by(Job.created_at.desc()).all()
