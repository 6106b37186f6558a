"""Application repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from kaamlink_backend.models.application import Application, ApplicationStatus
from .audited_base import AuditedRepository


class ApplicationRepository(AuditedRepository[Application]):
    """Repository for Application model operations."""

    def __init__(self):
        super().__init__(Application)

    def get_by_worker(self, db: Session, worker_id: UUID) -> List[Application]:
        """All applications a worker has sent, newest first."""
        return (
            db.query(Application)
            .filter(Application.worker_id == worker_id)
            .order_by(Application.created_at.desc())
            .all()
        )

    def get_by_contractor(self, db: Session, contractor_id: UUID) -> List[Application]:
        """All applications addressed to a contractor, newest first."""
        return (
            db.query(Application)
            .filter(Application.contractor_id == contractor_id)
            .order_by(Application.created_at.desc())
            .all()
        )

    def get_accepted_between(
        self,
        db: Session,
        job_id: UUID,
        party_a: UUID,
        party_b: UUID
    ) -> Optional[Application]:
        """Accepted application on a job linking two users in either role."""
        return (
            db.query(Application)
            .filter(
                and_(
                    Application.job_id == job_id,
                    Application.status == ApplicationStatus.ACCEPTED.value,
                    or_(
                        and_(Application.worker_id == party_a, Application.contractor_id == party_b),
                        and_(Application.worker_id == party_b, Application.contractor_id == party_a),
                    ),
                )
            )
            .first()
        )
