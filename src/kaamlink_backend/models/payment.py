"""Captured payment for an accepted application."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.custom_types import GUID


class Payment(Base):
    """Razorpay payment that moved an application to accepted."""

    __tablename__ = "payments"

    id = Column(GUID(), primary_key=True, default=uuid4)
    application_id = Column(GUID(), ForeignKey("applications.id"), nullable=False, index=True)
    contractor_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False)
    worker_id = Column(GUID(), ForeignKey("profiles.user_id"), nullable=False)
    job_id = Column(GUID(), ForeignKey("jobs.id"), nullable=False)
    razorpay_order_id = Column(String(64), nullable=False)
    razorpay_payment_id = Column(String(64), nullable=False, unique=True)
    razorpay_signature = Column(String(128), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, application_id={self.application_id}, amount={self.amount})>"
