"""Property-based tests for OTP codes, expiry and wage markup."""

from datetime import datetime, timedelta
from decimal import Decimal

from hypothesis import given, strategies as st

from kaamlink_backend.models.shift_log import ShiftLog, ShiftStatus
from kaamlink_backend.models.shift_otp import OtpType
from kaamlink_backend.services.application_service import compute_contractor_wage
from kaamlink_backend.services.otp_service import OtpService
from kaamlink_backend.services.rating_service import is_job_done

from conftest import FakeClock

issue_times = st.datetimes(min_value=datetime(2024, 1, 1), max_value=datetime(2035, 12, 31))


@given(st.integers(min_value=0, max_value=50))
def test_generated_codes_are_six_digits(_):
    code = OtpService.generate_code()

    assert len(code) == 6
    assert code.isdigit()
    assert 100000 <= int(code) <= 999999


@given(issued_at=issue_times, elapsed=st.integers(min_value=0, max_value=900))
def test_code_lives_exactly_five_minutes(db_session, marketplace, issued_at, elapsed):
    clock = FakeClock(issued_at)
    service = OtpService(clock=clock)
    otp = service.issue_for_application(db_session, marketplace.application, OtpType.START)

    assert otp.expires_at == issued_at + timedelta(seconds=300)

    clock.advance(seconds=elapsed)
    result = service.validate(db_session, marketplace.application.id, otp.code, "start")

    assert result.valid is (elapsed <= 300)
    assert result.expired is (elapsed > 300)


@given(
    status=st.sampled_from([None, ShiftStatus.ONGOING, ShiftStatus.COMPLETED]),
    worker_rated=st.booleans(),
)
def test_job_done_iff_latest_completed_and_rated(status, worker_rated):
    shift = ShiftLog(status=status.value) if status is not None else None

    expected = status is ShiftStatus.COMPLETED and worker_rated
    assert is_job_done(shift, worker_rated) is expected


@given(st.decimals(min_value=Decimal("0.01"), max_value=Decimal("100000"), places=2))
def test_contractor_wage_markup(requested):
    wage = compute_contractor_wage(requested)
    marked_up = requested * Decimal("1.1")

    assert wage == wage.to_integral_value()
    fee = Decimal(50) if marked_up <= 50 else Decimal(100)
    assert abs(wage - (marked_up + fee)) <= Decimal("0.5")
    assert wage > requested
