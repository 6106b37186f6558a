"""Tests for the OTP-gated shift lifecycle."""

from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from kaamlink_backend.core.audit import AuditLog, AuditAction
from kaamlink_backend.core.error_handling import (
    NoActiveShift,
    NotFound,
    OtpExpired,
    OtpInvalid,
    PersistenceError,
    ShiftAlreadyActive,
    ValidationError,
)
from kaamlink_backend.models.application import ApplicationStatus
from kaamlink_backend.models.profile import ProfileRole
from kaamlink_backend.models.shift_log import ShiftLog, ShiftStatus
from kaamlink_backend.models.shift_otp import ShiftOtp, OtpType
from kaamlink_backend.services.otp_service import OtpService
from kaamlink_backend.services.shift_service import ShiftService

from conftest import make_application, make_profile


@pytest.fixture
def otp_service(clock):
    return OtpService(clock=clock)


@pytest.fixture
def shift_service(otp_service, clock):
    return ShiftService(otp_service=otp_service, clock=clock)


def start(shift_service, otp_service, db, application):
    otp = otp_service.issue_for_application(db, application, OtpType.START)
    return shift_service.start_shift(db, application.id, otp.code)


def shift_rows(db, application):
    return db.query(ShiftLog).filter(
        ShiftLog.job_id == application.job_id,
        ShiftLog.worker_id == application.worker_id,
        ShiftLog.contractor_id == application.contractor_id,
    ).all()


class TestStartShift:

    def test_relayed_code_opens_shift_and_cannot_be_reused(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        with patch.object(OtpService, "generate_code", return_value="482913"):
            otp_service.issue_for_application(db_session, app, OtpType.START)

        clock.advance(minutes=2)
        shift = shift_service.start_shift(db_session, app.id, "482913")

        assert shift.status == ShiftStatus.ONGOING.value
        assert shift.start_time == clock.now
        assert shift.end_time is None
        assert otp_service.validate(db_session, app.id, "482913", "start").valid is False

    def test_start_consumes_the_code(self, shift_service, otp_service, db_session, marketplace):
        app = marketplace.application
        otp = otp_service.issue_for_application(db_session, app, OtpType.START)

        shift_service.start_shift(db_session, app.id, otp.code)

        db_session.refresh(otp)
        assert otp.used is True

    def test_invalid_code_creates_no_shift(self, shift_service, otp_service, db_session, marketplace):
        app = marketplace.application
        otp = otp_service.issue_for_application(db_session, app, OtpType.START)
        wrong = "999999" if otp.code != "999999" else "999998"

        with pytest.raises(OtpInvalid):
            shift_service.start_shift(db_session, app.id, wrong)

        assert shift_rows(db_session, app) == []
        db_session.refresh(otp)
        assert otp.used is False

    def test_no_code_issued_creates_no_shift(self, shift_service, db_session, marketplace):
        with pytest.raises(OtpInvalid):
            shift_service.start_shift(db_session, marketplace.application.id, "123456")

        assert shift_rows(db_session, marketplace.application) == []

    def test_end_code_does_not_start_a_shift(self, shift_service, otp_service, db_session, marketplace):
        app = marketplace.application
        otp = otp_service.issue_for_application(db_session, app, OtpType.END)

        with pytest.raises(OtpInvalid):
            shift_service.start_shift(db_session, app.id, otp.code)

        assert shift_rows(db_session, app) == []

    def test_expired_code_creates_no_shift(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        otp = otp_service.issue_for_application(db_session, app, OtpType.START)
        clock.advance(minutes=6)

        with pytest.raises(OtpExpired):
            shift_service.start_shift(db_session, app.id, otp.code)

        assert shift_rows(db_session, app) == []

    def test_second_start_while_ongoing(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        start(shift_service, otp_service, db_session, app)
        clock.advance(minutes=1)
        second = otp_service.issue_for_application(db_session, app, OtpType.START)

        with pytest.raises(ShiftAlreadyActive):
            shift_service.start_shift(db_session, app.id, second.code)

        db_session.refresh(second)
        assert second.used is False
        assert len(shift_rows(db_session, app)) == 1

    def test_unique_index_violation_maps_to_already_active(self, shift_service, otp_service, db_session, marketplace):
        app = marketplace.application
        otp = otp_service.issue_for_application(db_session, app, OtpType.START)

        # Simulates a concurrent start that slipped past the ongoing check
        with patch.object(
            shift_service.repository,
            "create",
            side_effect=PersistenceError(
                "Failed to create ShiftLog",
                original_error=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")),
            ),
        ):
            with pytest.raises(ShiftAlreadyActive):
                shift_service.start_shift(db_session, app.id, otp.code)

        db_session.refresh(otp)
        assert otp.used is False

    def test_persistence_failure_leaves_code_unused(self, shift_service, otp_service, db_session, marketplace):
        app = marketplace.application
        otp = otp_service.issue_for_application(db_session, app, OtpType.START)

        with patch.object(
            shift_service.repository,
            "create",
            side_effect=PersistenceError(
                "Failed to create ShiftLog",
                original_error=OperationalError("INSERT", {}, Exception("database is locked")),
            ),
        ):
            with pytest.raises(PersistenceError):
                shift_service.start_shift(db_session, app.id, otp.code)

        db_session.refresh(otp)
        assert otp.used is False
        assert shift_rows(db_session, app) == []

    def test_requires_accepted_application(self, shift_service, db_session, marketplace):
        pending = make_application(
            db_session,
            make_profile(db_session, ProfileRole.WORKER),
            marketplace.job,
            status=ApplicationStatus.PENDING,
        )
        with pytest.raises(ValidationError):
            shift_service.start_shift(db_session, pending.id, "123456")

    def test_unknown_application(self, shift_service, db_session):
        with pytest.raises(NotFound):
            shift_service.start_shift(db_session, uuid4(), "123456")

    def test_start_is_audited(self, shift_service, otp_service, db_session, marketplace):
        shift = start(shift_service, otp_service, db_session, marketplace.application)

        entry = db_session.query(AuditLog).filter(AuditLog.record_id == shift.id).one()
        assert entry.action == AuditAction.SHIFT_STARTED.value
        assert entry.new_values["status"] == "ongoing"

    def test_audit_failure_does_not_undo_start(self, shift_service, otp_service, db_session, marketplace, engine):
        app = marketplace.application
        otp = otp_service.issue_for_application(db_session, app, OtpType.START)
        AuditLog.__table__.drop(bind=engine)

        shift = shift_service.start_shift(db_session, app.id, otp.code)

        db_session.expire_all()
        assert db_session.get(ShiftLog, shift.id).status == ShiftStatus.ONGOING.value
        assert db_session.get(ShiftOtp, otp.id).used is True


class TestEndShift:

    def test_end_completes_ongoing_shift(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        start(shift_service, otp_service, db_session, app)
        clock.advance(hours=8)
        end_otp = otp_service.issue_for_application(db_session, app, OtpType.END)

        shift = shift_service.end_shift(db_session, app.id, end_otp.code)

        assert shift.status == ShiftStatus.COMPLETED.value
        assert shift.end_time == clock.now
        assert shift.end_time >= shift.start_time
        completed = [s for s in shift_rows(db_session, app) if s.status == "completed"]
        assert len(completed) == 1
        db_session.refresh(end_otp)
        assert end_otp.used is True

    def test_end_without_ongoing_shift(self, shift_service, otp_service, db_session, marketplace):
        app = marketplace.application
        end_otp = otp_service.issue_for_application(db_session, app, OtpType.END)

        with pytest.raises(NoActiveShift):
            shift_service.end_shift(db_session, app.id, end_otp.code)

        assert shift_rows(db_session, app) == []
        db_session.refresh(end_otp)
        assert end_otp.used is False

    def test_end_after_completion_is_no_active_shift(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        start(shift_service, otp_service, db_session, app)
        clock.advance(hours=1)
        first_end = otp_service.issue_for_application(db_session, app, OtpType.END)
        shift_service.end_shift(db_session, app.id, first_end.code)

        clock.advance(minutes=1)
        second_end = otp_service.issue_for_application(db_session, app, OtpType.END)
        with pytest.raises(NoActiveShift):
            shift_service.end_shift(db_session, app.id, second_end.code)

    def test_end_code_expired_keeps_shift_ongoing(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        start(shift_service, otp_service, db_session, app)
        clock.advance(hours=4)
        end_otp = otp_service.issue_for_application(db_session, app, OtpType.END)
        clock.advance(minutes=6)

        result = otp_service.validate(db_session, app.id, end_otp.code, "end")
        assert result.valid is False
        assert result.expired is True
        assert result.record.id == end_otp.id

        with pytest.raises(OtpExpired):
            shift_service.end_shift(db_session, app.id, end_otp.code)

        current = shift_service.get_current_shift(db_session, app.id)
        assert current.status == ShiftStatus.ONGOING.value
        assert current.end_time is None

    def test_start_code_does_not_end_a_shift(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        start(shift_service, otp_service, db_session, app)
        clock.advance(minutes=30)
        another_start = otp_service.issue_for_application(db_session, app, OtpType.START)

        with pytest.raises(OtpInvalid):
            shift_service.end_shift(db_session, app.id, another_start.code)

    def test_end_persistence_failure_leaves_state_unchanged(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        start(shift_service, otp_service, db_session, app)
        clock.advance(hours=2)
        end_otp = otp_service.issue_for_application(db_session, app, OtpType.END)

        with patch.object(
            db_session,
            "commit",
            side_effect=OperationalError("UPDATE", {}, Exception("database is locked")),
        ):
            with pytest.raises(PersistenceError):
                shift_service.end_shift(db_session, app.id, end_otp.code)

        db_session.expire_all()
        assert db_session.get(ShiftOtp, end_otp.id).used is False
        assert shift_service.get_current_shift(db_session, app.id).status == ShiftStatus.ONGOING.value

    def test_repeat_shifts_get_new_rows(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        for _ in range(2):
            start(shift_service, otp_service, db_session, app)
            clock.advance(hours=8)
            end_otp = otp_service.issue_for_application(db_session, app, OtpType.END)
            shift_service.end_shift(db_session, app.id, end_otp.code)
            clock.advance(hours=16)

        rows = shift_rows(db_session, app)
        assert len(rows) == 2
        assert all(r.status == "completed" for r in rows)

    def test_end_is_audited_with_previous_values(self, shift_service, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        shift = start(shift_service, otp_service, db_session, app)
        clock.advance(hours=1)
        end_otp = otp_service.issue_for_application(db_session, app, OtpType.END)
        shift_service.end_shift(db_session, app.id, end_otp.code)

        entry = (
            db_session.query(AuditLog)
            .filter(AuditLog.record_id == shift.id, AuditLog.action == AuditAction.SHIFT_ENDED.value)
            .one()
        )
        assert entry.old_values["status"] == "ongoing"
        assert entry.new_values["status"] == "completed"


def test_current_shift_is_none_before_any_start(shift_service, db_session, marketplace):
    assert shift_service.get_current_shift(db_session, marketplace.application.id) is None
