"""Pydantic schemas for shift logs."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ShiftCodeRequest(BaseModel):
    """Code relayed by the contractor to unlock a shift transition."""

    code: str = Field(..., max_length=16, description="Six-digit code")


class ShiftLogResponse(BaseModel):
    """Schema for shift log response."""

    id: UUID
    job_id: UUID
    contractor_id: UUID
    worker_id: UUID
    start_time: datetime
    end_time: Optional[datetime]
    status: str

    class Config:
        from_attributes = True
