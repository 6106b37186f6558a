"""Pydantic schemas for shift OTPs."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, validator

VALID_OTP_TYPES = ['start', 'end']


def _check_type(v):
    if v not in VALID_OTP_TYPES:
        raise ValueError(f'Type must be one of: {", ".join(VALID_OTP_TYPES)}')
    return v


class OtpIssueRequest(BaseModel):
    """Request a fresh code for a shift transition."""

    type: str = Field(..., description="start or end")

    @validator('type')
    def validate_type(cls, v):
        return _check_type(v)


class OtpIssuedResponse(BaseModel):
    """Issued code metadata. The code itself only reaches the contractor."""

    id: UUID
    application_id: UUID
    type: str
    expires_at: datetime

    class Config:
        from_attributes = True


class OtpValidateRequest(BaseModel):
    code: str = Field(..., max_length=16, description="Six-digit code")
    type: str = Field(..., description="start or end")

    @validator('type')
    def validate_type(cls, v):
        return _check_type(v)


class OtpValidateResponse(BaseModel):
    """Outcome of a non-consuming check."""

    valid: bool
    reason: Optional[str] = Field(None, description="otp_invalid or otp_expired")
    otp_id: Optional[UUID] = None
    expires_at: Optional[datetime] = None


class PendingOtp(BaseModel):
    """A live code as shown on the contractor dashboard."""

    id: UUID
    application_id: UUID
    worker_id: UUID
    job_id: UUID
    code: str
    type: str
    expires_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class PendingOtpGroup(BaseModel):
    application_id: UUID
    otps: List[PendingOtp]
