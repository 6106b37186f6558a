"""Tests for shift OTP issuance, validation and consumption."""

from datetime import timedelta
from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from kaamlink_backend.core.audit import AuditLog, AuditAction
from kaamlink_backend.core.error_handling import (
    NotFound,
    OtpExpired,
    OtpInvalid,
    PersistenceError,
    ValidationError,
)
from kaamlink_backend.models.application import ApplicationStatus
from kaamlink_backend.models.profile import ProfileRole
from kaamlink_backend.models.shift_otp import ShiftOtp, OtpType
from kaamlink_backend.services.otp_service import OtpService, parse_otp_type

from conftest import make_application, make_job, make_profile


@pytest.fixture
def otp_service(clock):
    return OtpService(clock=clock)


def issue(service, db, application, otp_type=OtpType.START):
    return service.issue_for_application(db, application, otp_type)


class TestIssue:

    def test_issue_creates_six_digit_code_expiring_in_five_minutes(self, otp_service, db_session, marketplace, clock):
        otp = issue(otp_service, db_session, marketplace.application)

        assert len(otp.code) == 6
        assert otp.code.isdigit()
        assert 100000 <= int(otp.code) <= 999999
        assert otp.expires_at == clock.now + timedelta(seconds=300)
        assert otp.used is False
        assert otp.type == "start"
        assert otp.contractor_id == marketplace.contractor.user_id
        assert otp.worker_id == marketplace.worker.user_id

    def test_issue_writes_audit_entry(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application)

        entry = db_session.query(AuditLog).filter(AuditLog.record_id == otp.id).one()
        assert entry.action == AuditAction.OTP_ISSUED.value
        # The code itself is never written to the audit trail
        assert otp.code not in str(entry.new_values)

    def test_reissue_supersedes_live_code_of_same_type(self, otp_service, db_session, marketplace, clock):
        first = issue(otp_service, db_session, marketplace.application)
        clock.advance(seconds=30)
        second = issue(otp_service, db_session, marketplace.application)

        db_session.refresh(first)
        assert first.used is True
        assert second.used is False

    def test_reissue_leaves_other_type_alone(self, otp_service, db_session, marketplace):
        start = issue(otp_service, db_session, marketplace.application, OtpType.START)
        issue(otp_service, db_session, marketplace.application, OtpType.END)

        db_session.refresh(start)
        assert start.used is False

    def test_issue_unknown_application(self, otp_service, db_session, marketplace):
        with pytest.raises(NotFound):
            otp_service.issue(
                db_session,
                application_id=uuid4(),
                contractor_id=marketplace.contractor.user_id,
                worker_id=marketplace.worker.user_id,
                job_id=marketplace.job.id,
                otp_type="start",
            )

    def test_issue_missing_id_is_refused_before_any_write(self, otp_service, db_session, marketplace):
        with pytest.raises(ValidationError):
            otp_service.issue(
                db_session,
                application_id=marketplace.application.id,
                contractor_id=None,
                worker_id=marketplace.worker.user_id,
                job_id=marketplace.job.id,
                otp_type="start",
            )
        assert db_session.query(ShiftOtp).count() == 0

    def test_issue_with_mismatched_parties(self, otp_service, db_session, marketplace):
        with pytest.raises(ValidationError):
            otp_service.issue(
                db_session,
                application_id=marketplace.application.id,
                contractor_id=marketplace.contractor.user_id,
                worker_id=uuid4(),
                job_id=marketplace.job.id,
                otp_type="start",
            )

    def test_issue_requires_accepted_application(self, otp_service, db_session, marketplace):
        pending = make_application(
            db_session,
            make_profile(db_session, ProfileRole.WORKER),
            marketplace.job,
            status=ApplicationStatus.PENDING,
        )
        with pytest.raises(ValidationError):
            issue(otp_service, db_session, pending)

    def test_issue_invalid_type(self, otp_service, db_session, marketplace):
        with pytest.raises(ValidationError):
            issue(otp_service, db_session, marketplace.application, "pause")

    def test_issue_persistence_failure_leaves_nothing(self, otp_service, db_session, marketplace):
        with patch.object(
            otp_service.repository,
            "supersede_live",
            side_effect=OperationalError("UPDATE", {}, Exception("disk I/O error")),
        ):
            with pytest.raises(PersistenceError):
                issue(otp_service, db_session, marketplace.application)

        assert db_session.query(ShiftOtp).count() == 0


class TestValidate:

    def test_valid_before_expiry(self, otp_service, db_session, marketplace, clock):
        otp = issue(otp_service, db_session, marketplace.application)
        clock.advance(minutes=4)

        result = otp_service.validate(db_session, marketplace.application.id, otp.code, "start")

        assert result.valid is True
        assert result.record.id == otp.id

    def test_valid_at_exact_expiry_instant(self, otp_service, db_session, marketplace, clock):
        otp = issue(otp_service, db_session, marketplace.application)
        clock.advance(seconds=300)

        assert otp_service.validate(db_session, marketplace.application.id, otp.code, "start").valid is True

    def test_expired_returns_record(self, otp_service, db_session, marketplace, clock):
        otp = issue(otp_service, db_session, marketplace.application)
        clock.advance(seconds=301)

        result = otp_service.validate(db_session, marketplace.application.id, otp.code, "start")

        assert result.valid is False
        assert result.expired is True
        assert result.record.id == otp.id
        with pytest.raises(OtpExpired) as exc_info:
            result.raise_for_failure()
        assert exc_info.value.record.id == otp.id

    def test_wrong_code(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application)
        wrong = "100000" if otp.code != "100000" else "100001"

        result = otp_service.validate(db_session, marketplace.application.id, wrong, "start")

        assert result.valid is False
        assert result.record is None
        with pytest.raises(OtpInvalid):
            result.raise_for_failure()

    def test_wrong_type(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application, OtpType.START)

        result = otp_service.validate(db_session, marketplace.application.id, otp.code, "end")

        assert result.valid is False
        assert result.record is None

    def test_other_application(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application)

        assert otp_service.validate(db_session, uuid4(), otp.code, "start").valid is False

    @pytest.mark.parametrize("code", ["", "12345", "1234567", "abcdef", None])
    def test_malformed_code(self, otp_service, db_session, marketplace, code):
        issue(otp_service, db_session, marketplace.application)

        result = otp_service.validate(db_session, marketplace.application.id, code, "start")

        assert result.valid is False
        assert result.reason == OtpInvalid.code

    def test_surrounding_whitespace_is_ignored(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application)

        assert otp_service.validate(db_session, marketplace.application.id, f" {otp.code}\n", "start").valid

    def test_used_code_is_invalid_even_before_expiry(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application)
        otp_service.consume(db_session, otp.id)

        result = otp_service.validate(db_session, marketplace.application.id, otp.code, "start")

        assert result.valid is False
        assert result.record is None

    def test_used_code_is_invalid_after_expiry(self, otp_service, db_session, marketplace, clock):
        otp = issue(otp_service, db_session, marketplace.application)
        otp_service.consume(db_session, otp.id)
        clock.advance(minutes=10)

        result = otp_service.validate(db_session, marketplace.application.id, otp.code, "start")

        assert result.valid is False
        assert result.expired is False

    def test_validation_is_read_only(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application)

        for _ in range(3):
            assert otp_service.validate(db_session, marketplace.application.id, otp.code, "start").valid

        db_session.refresh(otp)
        assert otp.used is False

    def test_newest_matching_row_wins(self, otp_service, db_session, marketplace, clock):
        app = marketplace.application
        older = ShiftOtp(
            application_id=app.id, contractor_id=app.contractor_id, worker_id=app.worker_id,
            job_id=app.job_id, code="555555", type="start",
            expires_at=clock.now + timedelta(minutes=5), used=False, created_at=clock.now,
        )
        newer = ShiftOtp(
            application_id=app.id, contractor_id=app.contractor_id, worker_id=app.worker_id,
            job_id=app.job_id, code="555555", type="start",
            expires_at=clock.now + timedelta(minutes=6), used=False,
            created_at=clock.now + timedelta(minutes=1),
        )
        db_session.add_all([older, newer])
        db_session.commit()

        result = otp_service.validate(db_session, app.id, "555555", "start")

        assert result.record.id == newer.id


class TestConsume:

    def test_consume_marks_used(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application)

        otp_service.consume(db_session, otp.id)

        db_session.refresh(otp)
        assert otp.used is True

    def test_consume_twice_is_a_noop(self, otp_service, db_session, marketplace):
        otp = issue(otp_service, db_session, marketplace.application)

        otp_service.consume(db_session, otp.id)
        otp_service.consume(db_session, otp.id)

        db_session.refresh(otp)
        assert otp.used is True

    def test_consume_unknown(self, otp_service, db_session):
        with pytest.raises(NotFound):
            otp_service.consume(db_session, uuid4())


class TestPendingForContractor:

    def test_lists_live_codes_grouped_by_application(self, otp_service, db_session, marketplace):
        second_worker = make_profile(db_session, ProfileRole.WORKER)
        second_app = make_application(db_session, second_worker, marketplace.job)

        start = issue(otp_service, db_session, marketplace.application, OtpType.START)
        other = issue(otp_service, db_session, second_app, OtpType.START)

        pending = otp_service.pending_for_contractor(db_session, marketplace.contractor.user_id)

        assert set(pending) == {marketplace.application.id, second_app.id}
        assert [o.id for o in pending[marketplace.application.id]] == [start.id]
        assert [o.id for o in pending[second_app.id]] == [other.id]

    def test_hides_used_and_expired_codes(self, otp_service, db_session, marketplace, clock):
        used = issue(otp_service, db_session, marketplace.application, OtpType.START)
        otp_service.consume(db_session, used.id)
        issue(otp_service, db_session, marketplace.application, OtpType.END)
        clock.advance(minutes=6)

        assert otp_service.pending_for_contractor(db_session, marketplace.contractor.user_id) == {}

    def test_other_contractor_sees_nothing(self, otp_service, db_session, marketplace):
        issue(otp_service, db_session, marketplace.application)
        other = make_profile(db_session, ProfileRole.CONTRACTOR)
        make_job(db_session, other)

        assert otp_service.pending_for_contractor(db_session, other.user_id) == {}


def test_parse_otp_type():
    assert parse_otp_type("start") is OtpType.START
    assert parse_otp_type(OtpType.END) is OtpType.END
    with pytest.raises(ValidationError):
        parse_otp_type("START")


def test_generate_code_range():
    codes = {OtpService.generate_code() for _ in range(200)}
    assert all(len(c) == 6 and c.isdigit() for c in codes)


def test_pending_includes_code_at_expiry_instant(otp_service, db_session, marketplace, clock):
    otp = issue(otp_service, db_session, marketplace.application)
    clock.advance(seconds=300)

    pending = otp_service.pending_for_contractor(db_session, marketplace.contractor.user_id)

    assert [o.id for o in pending[marketplace.application.id]] == [otp.id]
