"""Pydantic schemas for Razorpay payments."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class OrderCreate(BaseModel):
    application_id: UUID
    amount: Decimal = Field(..., gt=0, description="Amount in rupees")


class OrderResponse(BaseModel):
    """Gateway order the client opens checkout with."""

    id: str
    amount: int = Field(..., description="Amount in paise")
    currency: str
    receipt: Optional[str] = None
    key_id: Optional[str] = None


class PaymentVerify(BaseModel):
    """Checkout callback fields plus the application being paid for."""

    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    application_id: UUID
    amount: Decimal = Field(..., gt=0)


class PaymentResponse(BaseModel):
    id: UUID
    application_id: UUID
    razorpay_order_id: str
    razorpay_payment_id: str
    amount: Decimal
    currency: str
    created_at: datetime

    class Config:
        from_attributes = True
