"""Pydantic schemas for ratings."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class RatingCreate(BaseModel):
    """Schema for rating the other party of a job."""

    job_id: UUID
    rated_id: UUID
    rating: int = Field(..., ge=1, le=5, description="Score from 1 to 5")
    review: Optional[str] = Field("", max_length=2000)


class RatingResponse(BaseModel):
    id: UUID
    job_id: UUID
    rater_id: UUID
    rated_id: UUID
    rating: int
    review: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class RatingSubmissionResponse(BaseModel):
    rating: RatingResponse
    completed: bool = Field(..., description="Job-done flag after this rating")


class RatingSummaryResponse(BaseModel):
    """Profile rating card."""

    user_id: UUID
    count: int
    average: Optional[float]
    badges: List[str]
    ratings: List[RatingResponse]
