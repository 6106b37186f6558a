"""Application management service."""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.error_handling import AuthorizationError, NotFound, ValidationError
from kaamlink_backend.models.application import Application, ApplicationStatus
from kaamlink_backend.models.profile import ProfileRole
from kaamlink_backend.models.shift_log import ShiftStatus
from kaamlink_backend.repositories.application import ApplicationRepository
from kaamlink_backend.repositories.job import JobRepository
from kaamlink_backend.repositories.profile import ProfileRepository
from kaamlink_backend.repositories.shift_log import ShiftLogRepository
from .rating_service import RatingService, is_job_done

logger = structlog.get_logger(__name__)

DECIDABLE_STATUSES = (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED)


def compute_contractor_wage(requested: Union[Decimal, float, int, str]) -> Decimal:
    """Wage shown to the contractor for a worker's requested wage.

    10% markup, then a flat 50 on top when the marked-up amount is at most
    50 and 100 otherwise, rounded to a whole rupee.
    """
    try:
        base = Decimal(str(requested))
    except (InvalidOperation, ValueError):
        raise ValidationError("Wage must be a number", field="requested_wage", value=requested)
    if not base.is_finite() or base <= 0:
        raise ValidationError("Wage must be greater than zero", field="requested_wage", value=requested)

    marked = base * Decimal("1.1")
    marked += Decimal(50) if marked <= 50 else Decimal(100)
    return marked.quantize(Decimal(1), rounding=ROUND_HALF_UP)


@dataclass
class WorkerApplicationView:
    application: Application
    completed: bool


@dataclass
class ContractorApplicationView:
    application: Application
    shift_status: Optional[str]


class ApplicationService:
    """Service for managing application operations."""

    def __init__(self):
        self.repository = ApplicationRepository()
        self.jobs = JobRepository()
        self.profiles = ProfileRepository()
        self.shift_logs = ShiftLogRepository()
        self.ratings = RatingService()

    def get_application(self, db: Session, application_id: UUID) -> Application:
        """Get application by ID.

        Raises:
            NotFound: If the application does not exist
        """
        application = self.repository.get_by_id(db, application_id)
        if application is None:
            raise NotFound(f"Application with ID {application_id} not found", resource="application")
        return application

    def apply(
        self,
        db: Session,
        worker_id: UUID,
        job_id: UUID,
        requested_wage: Union[Decimal, float, int, str]
    ) -> Application:
        """Create a pending application from a worker to a job.

        Raises:
            ValidationError: Bad wage, caller is not a worker, or applying to own job
            NotFound: Worker profile or job missing
        """
        contractor_wage = compute_contractor_wage(requested_wage)

        worker = self.profiles.get_by_id(db, worker_id)
        if worker is None:
            raise NotFound(f"Profile {worker_id} not found", resource="profile")
        if worker.role != ProfileRole.WORKER.value:
            raise ValidationError("Only workers can apply to jobs", field="role", value=worker.role)

        job = self.jobs.get_by_id(db, job_id)
        if job is None:
            raise NotFound(f"Job with ID {job_id} not found", resource="job")
        if job.contractor_id == worker_id:
            raise ValidationError("Cannot apply to your own job", field="job_id")

        application = self.repository.create_with_audit(
            db,
            actor_id=worker_id,
            worker_id=worker_id,
            contractor_id=job.contractor_id,
            job_id=job_id,
            status=ApplicationStatus.PENDING.value,
            offered_wage=Decimal(str(requested_wage)),
            contractor_wage=contractor_wage,
        )

        logger.info(
            "Application created",
            application_id=str(application.id),
            job_id=str(job_id),
            worker_id=str(worker_id),
            contractor_wage=str(contractor_wage)
        )
        return application

    def decide(
        self,
        db: Session,
        application_id: UUID,
        contractor_id: UUID,
        status: Union[ApplicationStatus, str]
    ) -> Application:
        """Accept or reject an application as its contractor.

        Raises:
            ValidationError: Status other than accepted/rejected
            NotFound: Application missing
            AuthorizationError: Caller is not the application's contractor
        """
        try:
            status = ApplicationStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid status: {status}", field="status", value=status)
        if status not in DECIDABLE_STATUSES:
            raise ValidationError("Status must be accepted or rejected", field="status", value=status.value)

        application = self.get_application(db, application_id)
        if application.contractor_id != contractor_id:
            raise AuthorizationError("Only the job's contractor can decide on this application")

        if application.status == status.value:
            logger.info("Application already in target status", application_id=str(application_id))
            return application

        updated = self.repository.update_with_audit(
            db, application_id, actor_id=contractor_id, status=status.value
        )
        logger.info(
            "Application decided",
            application_id=str(application_id),
            status=status.value
        )
        return updated

    def completion_flag(self, db: Session, application_id: UUID) -> bool:
        """Whether the application's job is done.

        Derived on every call from the latest shift log and the worker's
        rating; never stored.
        """
        application = self.get_application(db, application_id)
        return self._completion_for(db, application)

    def _completion_for(self, db: Session, application: Application) -> bool:
        latest = self.shift_logs.get_latest(db, *application.shift_key)
        if latest is None or not latest.is_completed:
            return False
        return is_job_done(latest, self.ratings.has_rated(db, application.job_id, application.worker_id))

    def worker_applications(self, db: Session, worker_id: UUID) -> List[WorkerApplicationView]:
        """A worker's applications, newest first, with completion flags."""
        return [
            WorkerApplicationView(application=app, completed=self._completion_for(db, app))
            for app in self.repository.get_by_worker(db, worker_id)
        ]

    def contractor_applications(self, db: Session, contractor_id: UUID) -> List[ContractorApplicationView]:
        """A contractor's applications annotated with the latest shift status.

        Applications for jobs that are done (shift logs exist and none is
        ongoing) are left out.
        """
        applications = self.repository.get_by_contractor(db, contractor_id)
        statuses_by_job = self.shift_logs.get_statuses_by_job(db, {a.job_id for a in applications})

        views = []
        for app in applications:
            statuses = statuses_by_job.get(app.job_id, [])
            if statuses and ShiftStatus.ONGOING.value not in statuses:
                continue
            latest = self.shift_logs.get_latest(db, *app.shift_key)
            views.append(ContractorApplicationView(
                application=app,
                shift_status=latest.status if latest else None,
            ))
        return views
