"""Rating gate and rating aggregation."""

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.error_handling import AuthorizationError, DuplicateRating, NotFound, ValidationError
from kaamlink_backend.models.rating import Rating
from kaamlink_backend.models.shift_log import ShiftLog
from kaamlink_backend.repositories.application import ApplicationRepository
from kaamlink_backend.repositories.job import JobRepository
from kaamlink_backend.repositories.rating import RatingRepository
from kaamlink_backend.repositories.shift_log import ShiftLogRepository

logger = structlog.get_logger(__name__)

EXPERIENCED_MIN_RATINGS = 20
TOP_RATED_MIN_AVERAGE = 4.5


@dataclass
class RatingSubmission:
    """A stored rating plus the recomputed completion flag."""
    rating: Rating
    completed: bool


@dataclass
class RatingSummary:
    """What a profile page shows about the ratings a user received."""
    count: int
    average: Optional[float]
    badges: List[str] = field(default_factory=list)
    ratings: List[Rating] = field(default_factory=list)


class RatingService:
    """Gates ratings on a completed shift; one rating per (job, rater); drives the job-done flag."""

    def __init__(self):
        self.repository = RatingRepository()
        self.jobs = JobRepository()
        self.applications = ApplicationRepository()
        self.shift_logs = ShiftLogRepository()

    def submit(
        self,
        db: Session,
        job_id: UUID,
        rater_id: UUID,
        rated_id: UUID,
        rating: int,
        review: Optional[str] = ""
    ) -> RatingSubmission:
        """Store a rating and recompute completion for the linking application.

        Only the worker and contractor of an accepted application on the job
        may rate each other, and only once the latest shift for that
        application has completed.

        Raises:
            ValidationError: Score outside 1-5, self-rating, or no completed shift yet
            NotFound: Job does not exist
            AuthorizationError: Rater and rated are not the parties of an accepted application
            DuplicateRating: The rater already rated this job
            PersistenceError: The write failed
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be an integer between 1 and 5", field="rating", value=rating)
        if rater_id == rated_id:
            raise ValidationError("Users cannot rate themselves", field="rated_id")

        if not self.jobs.exists(db, job_id):
            raise NotFound(f"Job with ID {job_id} not found", resource="job")

        application = self.applications.get_accepted_between(db, job_id, rater_id, rated_id)
        if application is None:
            logger.info("Rating refused: no accepted application", job_id=str(job_id), rater_id=str(rater_id))
            raise AuthorizationError("Only the parties of an accepted application can rate each other")

        latest = self.shift_logs.get_latest(
            db, application.job_id, application.contractor_id, application.worker_id
        )
        if latest is None or not latest.is_completed:
            raise ValidationError("Ratings open once the shift has been completed", field="job_id")

        if self.repository.get_by_job_and_rater(db, job_id, rater_id) is not None:
            logger.info("Duplicate rating refused", job_id=str(job_id), rater_id=str(rater_id))
            raise DuplicateRating()

        stored = self.repository.create(
            db,
            job_id=job_id,
            rater_id=rater_id,
            rated_id=rated_id,
            rating=rating,
            review=(review or "").strip(),
        )

        worker_rated = rater_id == application.worker_id or self.has_rated(db, job_id, application.worker_id)
        completed = is_job_done(latest, worker_rated)

        logger.info(
            "Rating submitted",
            rating_id=str(stored.id),
            job_id=str(job_id),
            rating=rating,
            completed=completed
        )
        return RatingSubmission(rating=stored, completed=completed)

    def has_rated(self, db: Session, job_id: UUID, rater_id: UUID) -> bool:
        return self.repository.get_by_job_and_rater(db, job_id, rater_id) is not None

    def summary(self, db: Session, user_id: UUID) -> RatingSummary:
        """Count, one-decimal average and badges for ratings a user received."""
        ratings = self.repository.get_for_rated(db, user_id)
        if not ratings:
            return RatingSummary(count=0, average=None, badges=["New Worker"])

        average = round(sum(r.rating for r in ratings) / len(ratings), 1)
        badges = []
        if len(ratings) >= EXPERIENCED_MIN_RATINGS:
            badges.append("Experienced")
        if average >= TOP_RATED_MIN_AVERAGE:
            badges.append("Top Rated")

        return RatingSummary(count=len(ratings), average=average, badges=badges, ratings=ratings)


def is_job_done(latest_shift: Optional[ShiftLog], worker_rated: bool) -> bool:
    """Completion flag: the latest shift is completed and the worker has rated."""
    return latest_shift is not None and latest_shift.is_completed and worker_rated
