"""Shift OTP issuance, validation and consumption."""

import re
import secrets
from dataclasses import dataclass
from typing import Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.audit import AuditAction
from kaamlink_backend.core.clock import Clock, utcnow, expires_at, is_expired
from kaamlink_backend.core.config import settings
from kaamlink_backend.core.error_handling import (
    NotFound,
    OtpExpired,
    OtpInvalid,
    PersistenceError,
    ValidationError,
)
from kaamlink_backend.models.application import Application
from kaamlink_backend.models.shift_otp import ShiftOtp, OtpType
from kaamlink_backend.repositories.application import ApplicationRepository
from kaamlink_backend.repositories.shift_otp import ShiftOtpRepository

logger = structlog.get_logger(__name__)

CODE_PATTERN = re.compile(r"^\d{6}$")


def parse_otp_type(value: Union[OtpType, str]) -> OtpType:
    """Normalize an OTP type, refusing anything but start/end."""
    try:
        return OtpType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid OTP type: {value}. Must be one of {[t.value for t in OtpType]}",
            field="type",
            value=value
        )


@dataclass
class OtpValidation:
    """Outcome of checking a submitted code.

    ``record`` is set for a valid code and for an expired one, so callers can
    tell "expired" apart from "no such code".
    """
    valid: bool
    record: Optional[ShiftOtp] = None
    reason: Optional[str] = None

    @property
    def expired(self) -> bool:
        return self.reason == OtpExpired.code

    def raise_for_failure(self) -> ShiftOtp:
        """Return the record of a valid code, otherwise raise the matching error."""
        if self.valid:
            return self.record
        if self.expired:
            raise OtpExpired(record=self.record)
        raise OtpInvalid()


class OtpService:
    """Issues, validates and consumes shift OTPs."""

    def __init__(self, clock: Clock = utcnow, ttl_seconds: Optional[int] = None):
        self.clock = clock
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.otp_ttl_seconds
        self.repository = ShiftOtpRepository()
        self.applications = ApplicationRepository()

    @staticmethod
    def generate_code() -> str:
        """Uniformly random code in 100000-999999, kept as text."""
        return str(100000 + secrets.randbelow(900000))

    def issue(
        self,
        db: Session,
        application_id: UUID,
        contractor_id: UUID,
        worker_id: UUID,
        job_id: UUID,
        otp_type: Union[OtpType, str],
        actor_id: Optional[UUID] = None
    ) -> ShiftOtp:
        """Issue a new code for (application, type).

        Earlier live codes for the same (application, type) are marked used in
        the same transaction, so exactly one code is current afterwards.

        Raises:
            ValidationError: Unknown type, mismatched ids or application not accepted
            NotFound: Application does not exist
            PersistenceError: The write failed; nothing was issued
        """
        otp_type = parse_otp_type(otp_type)
        for name, value in (
            ("application_id", application_id),
            ("contractor_id", contractor_id),
            ("worker_id", worker_id),
            ("job_id", job_id),
        ):
            if value is None:
                raise ValidationError(f"{name} is required", field=name)

        application = self.applications.get_by_id(db, application_id)
        if application is None:
            raise NotFound(f"Application with ID {application_id} not found", resource="application")

        if (application.contractor_id, application.worker_id, application.job_id) != (
            contractor_id, worker_id, job_id
        ):
            raise ValidationError("OTP parties do not match the application", field="application_id")

        if not application.is_accepted:
            raise ValidationError(
                "Application must be accepted before a shift can be verified",
                field="status",
                value=application.status
            )

        now = self.clock()
        try:
            superseded = self.repository.supersede_live(db, application_id, otp_type.value, now)
            otp = self.repository.create(
                db,
                commit=False,
                application_id=application_id,
                contractor_id=contractor_id,
                worker_id=worker_id,
                job_id=job_id,
                code=self.generate_code(),
                type=otp_type.value,
                expires_at=expires_at(now, self.ttl_seconds),
                used=False,
                created_at=now,
            )
            db.commit()
            db.refresh(otp)
        except PersistenceError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                "OTP issuance failed",
                application_id=str(application_id),
                otp_type=otp_type.value,
                error=str(e)
            )
            raise PersistenceError("Failed to issue OTP", original_error=e)

        logger.info(
            "OTP issued",
            otp_id=str(otp.id),
            application_id=str(application_id),
            otp_type=otp_type.value,
            superseded=superseded,
            expires_at=otp.expires_at.isoformat()
        )

        self.repository.audit_logger.record(
            db,
            table_name=ShiftOtp.__tablename__,
            record_id=otp.id,
            action=AuditAction.OTP_ISSUED,
            new_values={"application_id": str(application_id), "type": otp_type.value},
            actor_id=actor_id,
        )
        return otp

    def issue_for_application(
        self,
        db: Session,
        application: Application,
        otp_type: Union[OtpType, str],
        actor_id: Optional[UUID] = None
    ) -> ShiftOtp:
        """Issue a code scoped to an already loaded application."""
        return self.issue(
            db,
            application_id=application.id,
            contractor_id=application.contractor_id,
            worker_id=application.worker_id,
            job_id=application.job_id,
            otp_type=otp_type,
            actor_id=actor_id,
        )

    def validate(
        self,
        db: Session,
        application_id: UUID,
        submitted_code: str,
        otp_type: Union[OtpType, str]
    ) -> OtpValidation:
        """Check a submitted code without consuming it."""
        otp_type = parse_otp_type(otp_type)
        code = (submitted_code or "").strip()

        if not CODE_PATTERN.match(code):
            logger.info("Malformed OTP submitted", application_id=str(application_id))
            return OtpValidation(valid=False, reason=OtpInvalid.code)

        record = self.repository.find_latest_unused(db, application_id, code, otp_type.value)
        if record is None:
            logger.info(
                "OTP not matched",
                application_id=str(application_id),
                otp_type=otp_type.value
            )
            return OtpValidation(valid=False, reason=OtpInvalid.code)

        if is_expired(record.expires_at, self.clock()):
            logger.info(
                "OTP expired",
                otp_id=str(record.id),
                application_id=str(application_id),
                expired_at=record.expires_at.isoformat()
            )
            return OtpValidation(valid=False, record=record, reason=OtpExpired.code)

        return OtpValidation(valid=True, record=record)

    def consume(self, db: Session, otp_id: UUID) -> None:
        """Mark a code used. Consuming an already used code is a no-op.

        Raises:
            NotFound: No such code
            PersistenceError: The write failed
        """
        otp = self.repository.get_by_id(db, otp_id)
        if otp is None:
            raise NotFound(f"OTP with ID {otp_id} not found", resource="shift_otp")

        if otp.used:
            logger.debug("OTP already consumed", otp_id=str(otp_id))
            return

        self.repository.update(db, otp_id, used=True)
        logger.info("OTP consumed", otp_id=str(otp_id))

    def pending_for_contractor(self, db: Session, contractor_id: UUID) -> Dict[UUID, List[ShiftOtp]]:
        """Live codes the contractor must relay, grouped by application."""
        grouped: Dict[UUID, List[ShiftOtp]] = {}
        for otp in self.repository.get_pending_for_contractor(db, contractor_id, self.clock()):
            grouped.setdefault(otp.application_id, []).append(otp)
        return grouped
