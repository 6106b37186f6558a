"""Razorpay order creation and payment verification."""

import hashlib
import hmac
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Optional, Union
from uuid import UUID

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.audit import AuditAction
from kaamlink_backend.core.config import settings
from kaamlink_backend.core.error_handling import (
    ConfigurationError,
    ExternalServiceError,
    NotFound,
    PersistenceError,
    SignatureMismatch,
    ValidationError,
)
from kaamlink_backend.models.application import Application, ApplicationStatus
from kaamlink_backend.models.payment import Payment
from kaamlink_backend.repositories.application import ApplicationRepository
from kaamlink_backend.repositories.payment import PaymentRepository

logger = structlog.get_logger(__name__)

CURRENCY = "INR"


def to_paise(amount: Union[Decimal, float, int, str]) -> int:
    """Rupees to the integer paise the gateway expects."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount must be a number", field="amount", value=amount)
    if not value.is_finite() or value <= 0:
        raise ValidationError("Amount must be greater than zero", field="amount", value=amount)
    return int((value * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Hex HMAC-SHA256 of ``order_id|payment_id``."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


@dataclass
class RazorpayOrder:
    id: str
    amount: int
    currency: str
    receipt: Optional[str] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "RazorpayOrder":
        return cls(
            id=data["id"],
            amount=int(data["amount"]),
            currency=data.get("currency", CURRENCY),
            receipt=data.get("receipt"),
        )


class RazorpayClient:
    """Minimal REST client for the orders endpoint."""

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.key_id = key_id or settings.razorpay_key_id
        self.key_secret = key_secret or settings.razorpay_key_secret
        self.api_base = (api_base or settings.razorpay_api_base).rstrip("/")
        self.timeout = timeout or settings.razorpay_timeout_seconds

    def ensure_configured(self) -> None:
        if not (self.key_id and self.key_secret):
            raise ConfigurationError("Razorpay credentials are not configured")

    def create_order(self, amount_paise: int, receipt: str, notes: Dict[str, str]) -> RazorpayOrder:
        self.ensure_configured()
        payload = {
            "amount": amount_paise,
            "currency": CURRENCY,
            "receipt": receipt,
            "notes": notes,
        }
        try:
            response = requests.post(
                f"{self.api_base}/orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Razorpay request failed", error=str(e))
            raise ExternalServiceError("Payment gateway unreachable", service_name="razorpay", original_error=e)

        if response.status_code >= 400:
            logger.error(
                "Razorpay rejected order",
                status_code=response.status_code,
                body=response.text[:500]
            )
            raise ExternalServiceError(
                f"Payment gateway returned {response.status_code}",
                service_name="razorpay"
            )

        try:
            return RazorpayOrder.from_response(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise ExternalServiceError("Malformed payment gateway response", service_name="razorpay", original_error=e)


class PaymentService:
    """Takes a contractor's payment and accepts the application it pays for."""

    def __init__(self, client: Optional[RazorpayClient] = None):
        self.client = client or RazorpayClient()
        self.repository = PaymentRepository()
        self.applications = ApplicationRepository()

    def _get_application(self, db: Session, application_id: UUID) -> Application:
        application = self.applications.get_by_id(db, application_id)
        if application is None:
            raise NotFound(f"Application with ID {application_id} not found", resource="application")
        return application

    def create_order(
        self,
        db: Session,
        application_id: UUID,
        amount: Union[Decimal, float, int, str]
    ) -> RazorpayOrder:
        """Open a gateway order for an application.

        Raises:
            ValidationError: Non-positive amount
            NotFound: Application missing
            ConfigurationError: Credentials missing
            ExternalServiceError: Gateway failure
        """
        amount_paise = to_paise(amount)
        self._get_application(db, application_id)

        order = self.client.create_order(
            amount_paise,
            receipt=f"app:{application_id}",
            notes={"application_id": str(application_id)},
        )
        logger.info(
            "Payment order created",
            order_id=order.id,
            application_id=str(application_id),
            amount_paise=amount_paise
        )
        return order

    def verify_payment(
        self,
        db: Session,
        order_id: str,
        payment_id: str,
        signature: str,
        application_id: UUID,
        amount: Union[Decimal, float, int, str],
        actor_id: Optional[UUID] = None
    ) -> Payment:
        """Check the gateway signature, record the payment and accept the application.

        Both writes commit together or not at all.

        Raises:
            ConfigurationError: Key secret missing
            SignatureMismatch: Signature does not match
            NotFound: Application missing
            PersistenceError: The write failed
        """
        self.client.ensure_configured()
        if not (order_id and payment_id and signature):
            raise ValidationError("order_id, payment_id and signature are required", field="signature")

        expected = payment_signature(order_id, payment_id, self.client.key_secret)
        if not hmac.compare_digest(expected, signature):
            logger.warning("Payment signature mismatch", order_id=order_id, application_id=str(application_id))
            raise SignatureMismatch()

        to_paise(amount)
        application = self._get_application(db, application_id)
        old_status = application.status

        try:
            payment = self.repository.create(
                db,
                commit=False,
                application_id=application.id,
                contractor_id=application.contractor_id,
                worker_id=application.worker_id,
                job_id=application.job_id,
                razorpay_order_id=order_id,
                razorpay_payment_id=payment_id,
                razorpay_signature=signature,
                amount=Decimal(str(amount)),
                currency=CURRENCY,
            )
            application.status = ApplicationStatus.ACCEPTED.value
            db.commit()
            db.refresh(payment)
        except PersistenceError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Payment save failed", order_id=order_id, error=str(e))
            raise PersistenceError("Failed to save payment", original_error=e)

        logger.info(
            "Payment verified",
            payment_id=str(payment.id),
            application_id=str(application_id),
            order_id=order_id
        )

        self.applications.audit_logger.record(
            db,
            table_name=Application.__tablename__,
            record_id=application.id,
            action=AuditAction.UPDATE,
            old_values={"status": old_status},
            new_values={"status": application.status},
            actor_id=actor_id,
            reason=f"payment {payment_id}",
        )
        return payment
