"""Repository pattern implementations for data access."""

from .base import BaseRepository
from .profile import ProfileRepository
from .job import JobRepository
from .application import ApplicationRepository
from .shift_otp import ShiftOtpRepository
from .shift_log import ShiftLogRepository
from .rating import RatingRepository
from .payment import PaymentRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
    "JobRepository",
    "ApplicationRepository",
    "ShiftOtpRepository",
    "ShiftLogRepository",
    "RatingRepository",
    "PaymentRepository",
]
