"""Pydantic schemas for Job model."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, validator


class JobCreate(BaseModel):
    """Schema for posting a job."""

    title: str = Field(..., min_length=1, max_length=255, description="Job title")
    description: Optional[str] = Field(None, description="What the work involves")
    location: Optional[str] = Field(None, max_length=255, description="Work site")
    wage: Optional[Decimal] = Field(None, gt=0, description="Advertised daily wage")

    @validator('title')
    def validate_title(cls, v):
        """Reject whitespace-only titles."""
        if not v.strip():
            raise ValueError('Title cannot be blank')
        return v.strip()


class JobResponse(BaseModel):
    """Schema for job response."""

    id: UUID
    contractor_id: UUID
    title: str
    description: Optional[str]
    location: Optional[str]
    wage: Optional[Decimal]
    created_at: datetime

    class Config:
        from_attributes = True
