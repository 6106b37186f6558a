"""Shift OTP repository for database operations."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.models.shift_otp import ShiftOtp
from .audited_base import AuditedRepository

logger = structlog.get_logger(__name__)


class ShiftOtpRepository(AuditedRepository[ShiftOtp]):
    """Repository for ShiftOtp model operations."""

    def __init__(self):
        super().__init__(ShiftOtp)

    def find_latest_unused(
        self,
        db: Session,
        application_id: UUID,
        code: str,
        otp_type: str
    ) -> Optional[ShiftOtp]:
        """Most recently issued unused code matching application, code and type.

        The issuer used to allow several live rows per (application, type), so
        ties are broken by issue time, newest wins.
        """
        return (
            db.query(ShiftOtp)
            .filter(
                and_(
                    ShiftOtp.application_id == application_id,
                    ShiftOtp.code == code,
                    ShiftOtp.type == otp_type,
                    ShiftOtp.used == False,  # noqa: E712
                )
            )
            .order_by(ShiftOtp.created_at.desc())
            .first()
        )

    def supersede_live(
        self,
        db: Session,
        application_id: UUID,
        otp_type: str,
        now: datetime
    ) -> int:
        """Mark every unused, unexpired code of (application, type) as used.

        Flushes only; the caller owns the transaction.

        Returns:
            Number of codes superseded
        """
        count = (
            db.query(ShiftOtp)
            .filter(
                and_(
                    ShiftOtp.application_id == application_id,
                    ShiftOtp.type == otp_type,
                    ShiftOtp.used == False,  # noqa: E712
                    ShiftOtp.expires_at >= now,
                )
            )
            .update({ShiftOtp.used: True}, synchronize_session="fetch")
        )
        if count:
            logger.info(
                "Superseded live OTPs",
                application_id=str(application_id),
                otp_type=otp_type,
                count=count
            )
        return count

    def claim(self, db: Session, otp_id: UUID) -> bool:
        """Conditionally flip used false -> true. Flushes only.

        Returns:
            True if this call consumed the code, False if it was already used
        """
        count = (
            db.query(ShiftOtp)
            .filter(and_(ShiftOtp.id == otp_id, ShiftOtp.used == False))  # noqa: E712
            .update({ShiftOtp.used: True}, synchronize_session="fetch")
        )
        return count == 1

    def get_pending_for_contractor(
        self,
        db: Session,
        contractor_id: UUID,
        now: datetime
    ) -> List[ShiftOtp]:
        """Codes a contractor still has to relay: unused and not yet expired."""
        return (
            db.query(ShiftOtp)
            .filter(
                and_(
                    ShiftOtp.contractor_id == contractor_id,
                    ShiftOtp.used == False,  # noqa: E712
                    ShiftOtp.expires_at >= now,
                )
            )
            .order_by(ShiftOtp.created_at.desc())
            .all()
        )
