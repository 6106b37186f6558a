"""Database models for the KaamLink backend."""

from .profile import Profile, ProfileRole
from .job import Job
from .application import Application, ApplicationStatus
from .shift_otp import ShiftOtp, OtpType
from .shift_log import ShiftLog, ShiftStatus
from .rating import Rating
from .payment import Payment

from kaamlink_backend.core.audit import AuditLog

__all__ = [
    "Profile", "ProfileRole", "Job", "Application", "ApplicationStatus",
    "ShiftOtp", "OtpType", "ShiftLog", "ShiftStatus", "Rating", "Payment", "AuditLog",
]
