"""Rating model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, CheckConstraint

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.custom_types import GUID


class Rating(Base):
    """A review one party leaves about the other for a job. Immutable."""

    __tablename__ = "ratings"

    id = Column(GUID(), primary_key=True, default=uuid4)
    rater_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False)
    rated_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False, index=True)
    job_id = Column(GUID(), ForeignKey("jobs.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    review = Column(Text, default="", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="check_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Rating(id={self.id}, job_id={self.job_id}, rating={self.rating})>"
