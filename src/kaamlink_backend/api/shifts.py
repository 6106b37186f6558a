"""Shift OTP and shift lifecycle API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.database import get_db
from kaamlink_backend.core.logging import performance_logger
from kaamlink_backend.auth.dependencies import (
    ensure_application_party,
    get_current_contractor,
    get_current_profile,
    get_current_worker,
)
from kaamlink_backend.models.profile import Profile
from kaamlink_backend.schemas.otp import (
    OtpIssueRequest,
    OtpIssuedResponse,
    OtpValidateRequest,
    OtpValidateResponse,
    PendingOtpGroup,
)
from kaamlink_backend.schemas.shift import ShiftCodeRequest, ShiftLogResponse
from kaamlink_backend.services.application_service import ApplicationService
from kaamlink_backend.services.otp_service import OtpService
from kaamlink_backend.services.shift_service import ShiftService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["shifts"])


def _load_for(db: Session, application_id: UUID, current: Profile):
    application = ApplicationService().get_application(db, application_id)
    ensure_application_party(application, current)
    return application


@router.post(
    "/applications/{application_id}/otps",
    response_model=OtpIssuedResponse,
    status_code=status.HTTP_201_CREATED
)
async def issue_otp(
    application_id: UUID,
    request_data: OtpIssueRequest,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile)
):
    """Issue a start or end code; it shows up on the contractor dashboard."""
    with performance_logger.log_operation_time(
        "issue_otp",
        user_id=str(current.user_id),
        application_id=str(application_id)
    ):
        application = _load_for(db, application_id, current)
        return OtpService().issue_for_application(
            db, application, request_data.type, actor_id=current.user_id
        )


@router.post("/applications/{application_id}/otps/validate", response_model=OtpValidateResponse)
async def validate_otp(
    application_id: UUID,
    request_data: OtpValidateRequest,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_worker)
):
    """Check a code without consuming it."""
    _load_for(db, application_id, current)
    result = OtpService().validate(db, application_id, request_data.code, request_data.type)
    logger.info(
        "OTP checked",
        application_id=str(application_id),
        otp_type=request_data.type,
        valid=result.valid,
        reason=result.reason
    )
    return {
        "valid": result.valid,
        "reason": result.reason,
        "otp_id": result.record.id if result.record else None,
        "expires_at": result.record.expires_at if result.record else None,
    }


@router.get("/otps/pending", response_model=List[PendingOtpGroup])
async def list_pending_otps(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_contractor)
):
    """Live codes the contractor should read out to workers."""
    grouped = OtpService().pending_for_contractor(db, current.user_id)
    logger.info("Pending OTPs listed", user_id=str(current.user_id), applications=len(grouped))
    return [
        {"application_id": application_id, "otps": otps}
        for application_id, otps in grouped.items()
    ]


@router.post("/applications/{application_id}/shifts/start", response_model=ShiftLogResponse)
async def start_shift(
    application_id: UUID,
    request_data: ShiftCodeRequest,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_worker)
):
    """Open a shift with the start code relayed by the contractor."""
    with performance_logger.log_operation_time(
        "start_shift",
        user_id=str(current.user_id),
        application_id=str(application_id)
    ):
        _load_for(db, application_id, current)
        return ShiftService().start_shift(db, application_id, request_data.code, actor_id=current.user_id)


@router.post("/applications/{application_id}/shifts/end", response_model=ShiftLogResponse)
async def end_shift(
    application_id: UUID,
    request_data: ShiftCodeRequest,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_worker)
):
    """Close the ongoing shift with the end code."""
    with performance_logger.log_operation_time(
        "end_shift",
        user_id=str(current.user_id),
        application_id=str(application_id)
    ):
        _load_for(db, application_id, current)
        return ShiftService().end_shift(db, application_id, request_data.code, actor_id=current.user_id)


@router.get("/applications/{application_id}/shifts/current", response_model=Optional[ShiftLogResponse])
async def current_shift(
    application_id: UUID,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile)
):
    _load_for(db, application_id, current)
    return ShiftService().get_current_shift(db, application_id)
