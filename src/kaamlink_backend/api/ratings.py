"""Rating API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.database import get_db
from kaamlink_backend.core.logging import performance_logger
from kaamlink_backend.auth.dependencies import get_current_profile
from kaamlink_backend.models.profile import Profile
from kaamlink_backend.schemas.rating import RatingCreate, RatingSubmissionResponse, RatingSummaryResponse
from kaamlink_backend.services.rating_service import RatingService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["ratings"])


@router.post("/ratings", response_model=RatingSubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_rating(
    rating_data: RatingCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile)
):
    """Rate the other party of an accepted application once its shift has completed."""
    with performance_logger.log_operation_time(
        "submit_rating",
        user_id=str(current.user_id),
        job_id=str(rating_data.job_id)
    ):
        submission = RatingService().submit(
            db,
            job_id=rating_data.job_id,
            rater_id=current.user_id,
            rated_id=rating_data.rated_id,
            rating=rating_data.rating,
            review=rating_data.review,
        )
        logger.info(
            "Rating accepted",
            rating_id=str(submission.rating.id),
            rated_id=str(rating_data.rated_id),
            completed=submission.completed
        )
        return {"rating": submission.rating, "completed": submission.completed}


@router.get("/profiles/{user_id}/ratings", response_model=RatingSummaryResponse)
async def rating_summary(
    user_id: UUID,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile)
):
    """Average, badges and reviews for a profile."""
    with performance_logger.log_operation_time(
        "rating_summary",
        user_id=str(current.user_id),
        rated_id=str(user_id)
    ):
        summary = RatingService().summary(db, user_id)
    return {
        "user_id": user_id,
        "count": summary.count,
        "average": summary.average,
        "badges": summary.badges,
        "ratings": summary.ratings,
    }
