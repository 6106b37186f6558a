"""Pydantic schemas for Application model."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, validator


class ApplicationCreate(BaseModel):
    """Schema for a worker applying to a job."""

    job_id: UUID = Field(..., description="Job UUID")
    requested_wage: Decimal = Field(..., gt=0, description="Wage the worker asks for")


class ApplicationDecision(BaseModel):
    """Schema for a contractor accepting or rejecting an application."""

    status: str = Field(..., description="accepted or rejected")

    @validator('status')
    def validate_status(cls, v):
        """Validate decision status."""
        valid_statuses = ['accepted', 'rejected']
        if v not in valid_statuses:
            raise ValueError(f'Status must be one of: {", ".join(valid_statuses)}')
        return v


class ApplicationResponse(BaseModel):
    """Schema for application response."""

    id: UUID
    worker_id: UUID
    contractor_id: UUID
    job_id: UUID
    status: str
    offered_wage: Optional[Decimal]
    contractor_wage: Optional[Decimal]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WorkerApplicationResponse(BaseModel):
    """A worker's application with its job-done flag."""

    application: ApplicationResponse
    completed: bool


class ContractorApplicationResponse(BaseModel):
    """A contractor's application with the latest shift status, if any."""

    application: ApplicationResponse
    shift_status: Optional[str] = Field(None, description="ongoing, completed or null")


class CompletionResponse(BaseModel):
    application_id: UUID
    completed: bool
