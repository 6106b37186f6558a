"""Shift lifecycle with OTP-gated transitions."""

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.audit import AuditAction
from kaamlink_backend.core.clock import Clock, utcnow
from kaamlink_backend.core.error_handling import (
    NoActiveShift,
    NotFound,
    OtpInvalid,
    PersistenceError,
    ShiftAlreadyActive,
    ValidationError,
)
from kaamlink_backend.models.application import Application
from kaamlink_backend.models.shift_log import ShiftLog, ShiftStatus
from kaamlink_backend.models.shift_otp import OtpType
from kaamlink_backend.repositories.application import ApplicationRepository
from kaamlink_backend.repositories.shift_log import ShiftLogRepository
from .otp_service import OtpService

logger = structlog.get_logger(__name__)


class ShiftService:
    """Drives a shift log through NONE -> ONGOING -> COMPLETED.

    NONE is the absence of an ongoing row. Each transition validates an OTP,
    consumes it and writes the shift log in a single transaction, so a code is
    never spent without the shift change it was issued for.
    """

    def __init__(self, otp_service: Optional[OtpService] = None, clock: Clock = utcnow):
        self.clock = clock
        self.otp_service = otp_service or OtpService(clock=clock)
        self.applications = ApplicationRepository()
        self.repository = ShiftLogRepository()

    def _load_accepted_application(self, db: Session, application_id: UUID) -> Application:
        application = self.applications.get_by_id(db, application_id)
        if application is None:
            raise NotFound(f"Application with ID {application_id} not found", resource="application")
        if not application.is_accepted:
            raise ValidationError(
                "Application must be accepted before a shift can start",
                field="status",
                value=application.status
            )
        return application

    def get_current_shift(self, db: Session, application_id: UUID) -> Optional[ShiftLog]:
        """Latest shift log for the application's (job, contractor, worker)."""
        application = self.applications.get_by_id(db, application_id)
        if application is None:
            raise NotFound(f"Application with ID {application_id} not found", resource="application")
        return self.repository.get_latest(db, *application.shift_key)

    def start_shift(
        self,
        db: Session,
        application_id: UUID,
        code: str,
        actor_id: Optional[UUID] = None
    ) -> ShiftLog:
        """Open a new shift after a valid start OTP.

        Raises:
            NotFound: Application does not exist
            ValidationError: Application is not accepted
            OtpInvalid / OtpExpired: The code does not unlock a start
            ShiftAlreadyActive: A shift is already ongoing
            PersistenceError: The write failed; nothing changed
        """
        application = self._load_accepted_application(db, application_id)
        otp = self.otp_service.validate(db, application_id, code, OtpType.START).raise_for_failure()

        if self.repository.get_latest_ongoing(db, *application.shift_key) is not None:
            raise ShiftAlreadyActive()

        now = self.clock()
        try:
            if not self.otp_service.repository.claim(db, otp.id):
                db.rollback()
                raise OtpInvalid()

            shift = self.repository.create(
                db,
                commit=False,
                job_id=application.job_id,
                contractor_id=application.contractor_id,
                worker_id=application.worker_id,
                start_time=now,
                status=ShiftStatus.ONGOING.value,
            )
            db.commit()
            db.refresh(shift)
        except PersistenceError as e:
            db.rollback()
            if isinstance(e.original_error, IntegrityError):
                raise ShiftAlreadyActive()
            raise
        except IntegrityError:
            db.rollback()
            raise ShiftAlreadyActive()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Shift start failed", application_id=str(application_id), error=str(e))
            raise PersistenceError("Failed to start shift", original_error=e)

        logger.info(
            "Shift started",
            shift_id=str(shift.id),
            application_id=str(application_id),
            otp_id=str(otp.id),
            start_time=shift.start_time.isoformat()
        )

        self.repository.audit_logger.record(
            db,
            table_name=ShiftLog.__tablename__,
            record_id=shift.id,
            action=AuditAction.SHIFT_STARTED,
            new_values=self.repository.model_to_dict(shift),
            actor_id=actor_id,
            reason=f"start OTP {otp.id}",
        )
        return shift

    def end_shift(
        self,
        db: Session,
        application_id: UUID,
        code: str,
        actor_id: Optional[UUID] = None
    ) -> ShiftLog:
        """Complete the ongoing shift after a valid end OTP.

        Raises:
            NotFound: Application does not exist
            ValidationError: Application is not accepted
            OtpInvalid / OtpExpired: The code does not unlock an end
            NoActiveShift: Nothing is ongoing; the code is left unused
            PersistenceError: The write failed; nothing changed
        """
        application = self._load_accepted_application(db, application_id)
        otp = self.otp_service.validate(db, application_id, code, OtpType.END).raise_for_failure()

        shift = self.repository.get_latest_ongoing(db, *application.shift_key)
        if shift is None:
            logger.info("End requested without an ongoing shift", application_id=str(application_id))
            raise NoActiveShift()

        old_values = self.repository.model_to_dict(shift)
        now = self.clock()
        try:
            if not self.otp_service.repository.claim(db, otp.id):
                db.rollback()
                raise OtpInvalid()

            shift.end_time = max(now, shift.start_time)
            shift.status = ShiftStatus.COMPLETED.value
            db.commit()
            db.refresh(shift)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Shift end failed", application_id=str(application_id), error=str(e))
            raise PersistenceError("Failed to end shift", original_error=e)

        logger.info(
            "Shift completed",
            shift_id=str(shift.id),
            application_id=str(application_id),
            otp_id=str(otp.id),
            duration_seconds=(shift.end_time - shift.start_time).total_seconds()
        )

        self.repository.audit_logger.record(
            db,
            table_name=ShiftLog.__tablename__,
            record_id=shift.id,
            action=AuditAction.SHIFT_ENDED,
            old_values=old_values,
            new_values=self.repository.model_to_dict(shift),
            actor_id=actor_id,
            reason=f"end OTP {otp.id}",
        )
        return shift
