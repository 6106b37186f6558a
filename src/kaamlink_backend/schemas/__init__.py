"""Pydantic schemas for data validation and serialization."""

from .job import JobCreate, JobResponse
from .application import (
    ApplicationCreate,
    ApplicationDecision,
    ApplicationResponse,
    WorkerApplicationResponse,
    ContractorApplicationResponse,
    CompletionResponse,
)
from .otp import (
    OtpIssueRequest,
    OtpIssuedResponse,
    OtpValidateRequest,
    OtpValidateResponse,
    PendingOtp,
    PendingOtpGroup,
)
from .shift import ShiftCodeRequest, ShiftLogResponse
from .rating import RatingCreate, RatingResponse, RatingSubmissionResponse, RatingSummaryResponse
from .payment import OrderCreate, OrderResponse, PaymentVerify, PaymentResponse

__all__ = [
    "JobCreate", "JobResponse",
    "ApplicationCreate", "ApplicationDecision", "ApplicationResponse",
    "WorkerApplicationResponse", "ContractorApplicationResponse", "CompletionResponse",
    "OtpIssueRequest", "OtpIssuedResponse", "OtpValidateRequest", "OtpValidateResponse",
    "PendingOtp", "PendingOtpGroup",
    "ShiftCodeRequest", "ShiftLogResponse",
    "RatingCreate", "RatingResponse", "RatingSubmissionResponse", "RatingSummaryResponse",
    "OrderCreate", "OrderResponse", "PaymentVerify", "PaymentResponse",
]
