"""Rating repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from kaamlink_backend.models.rating import Rating
from .base import BaseRepository


class RatingRepository(BaseRepository[Rating]):
    """Repository for Rating model operations."""

    def __init__(self):
        super().__init__(Rating)

    def get_by_job_and_rater(self, db: Session, job_id: UUID, rater_id: UUID) -> Optional[Rating]:
        return (
            db.query(Rating)
            .filter(and_(Rating.job_id == job_id, Rating.rater_id == rater_id))
            .first()
        )

    def get_for_rated(self, db: Session, rated_id: UUID) -> List[Rating]:
        """Ratings received by a user, newest first."""
        return (
            db.query(Rating)
            .filter(Rating.rated_id == rated_id)
            .order_by(Rating.created_at.desc())
            .all()
        )
