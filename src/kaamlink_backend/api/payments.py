"""Payment API endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.database import get_db
from kaamlink_backend.core.logging import performance_logger
from kaamlink_backend.auth.dependencies import ensure_application_party, get_current_contractor
from kaamlink_backend.models.profile import Profile
from kaamlink_backend.schemas.payment import OrderCreate, OrderResponse, PaymentResponse, PaymentVerify
from kaamlink_backend.services.application_service import ApplicationService
from kaamlink_backend.services.payment_service import PaymentService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


def get_payment_service() -> PaymentService:
    return PaymentService()


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_contractor),
    service: PaymentService = Depends(get_payment_service)
):
    """Open a Razorpay order for an application the contractor owns."""
    application = ApplicationService().get_application(db, order_data.application_id)
    ensure_application_party(application, current, contractor_only=True)

    with performance_logger.log_operation_time(
        "create_payment_order",
        user_id=str(current.user_id),
        application_id=str(order_data.application_id)
    ):
        order = service.create_order(db, order_data.application_id, order_data.amount)
        logger.info("Payment order opened", order_id=order.id, amount_paise=order.amount)
        return {
            "id": order.id,
            "amount": order.amount,
            "currency": order.currency,
            "receipt": order.receipt,
            "key_id": service.client.key_id,
        }


@router.post("/verify", response_model=PaymentResponse)
async def verify_payment(
    payment_data: PaymentVerify,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_contractor),
    service: PaymentService = Depends(get_payment_service)
):
    """Verify the checkout signature and accept the paid application."""
    application = ApplicationService().get_application(db, payment_data.application_id)
    ensure_application_party(application, current, contractor_only=True)

    with performance_logger.log_operation_time(
        "verify_payment",
        user_id=str(current.user_id),
        application_id=str(payment_data.application_id)
    ):
        payment = service.verify_payment(
            db,
            order_id=payment_data.razorpay_order_id,
            payment_id=payment_data.razorpay_payment_id,
            signature=payment_data.razorpay_signature,
            application_id=payment_data.application_id,
            amount=payment_data.amount,
            actor_id=current.user_id,
        )
        logger.info("Payment verified", payment_id=str(payment.id), application_id=str(payment_data.application_id))
        return payment
