"""Service layer for business logic."""

from .otp_service import OtpService, OtpValidation
from .shift_service import ShiftService
from .rating_service import RatingService, RatingSubmission, RatingSummary
from .application_service import ApplicationService, compute_contractor_wage
from .job_service import JobService
from .payment_service import PaymentService, RazorpayClient

__all__ = [
    "OtpService",
    "OtpValidation",
    "ShiftService",
    "RatingService",
    "RatingSubmission",
    "RatingSummary",
    "ApplicationService",
    "compute_contractor_wage",
    "JobService",
    "PaymentService",
    "RazorpayClient",
]
