"""Application management API endpoints."""

from typing import List
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
from kaamlink_backend.schemas.application import (
    ApplicationCreate,
    ApplicationDecision,
    ApplicationResponse,
    CompletionResponse,
    ContractorApplicationResponse,
    WorkerApplicationResponse,
)
from kaamlink_backend.services.application_service import ApplicationService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def create_application(
    application_data: ApplicationCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_worker)
):
    """Apply to a job. The contractor-facing wage is computed here."""
    with performance_logger.log_operation_time("create_application", user_id=str(current.user_id)):
        return ApplicationService().apply(
            db,
            worker_id=current.user_id,
            job_id=application_data.job_id,
            requested_wage=application_data.requested_wage,
        )


@router.get("/mine", response_model=List[WorkerApplicationResponse])
async def list_my_applications(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_worker)
):
    """The worker's applications with their job-done flags."""
    with performance_logger.log_operation_time("list_worker_applications", user_id=str(current.user_id)):
        views = ApplicationService().worker_applications(db, current.user_id)
        logger.info("Worker applications listed", count=len(views), user_id=str(current.user_id))
        return [
            {"application": view.application, "completed": view.completed}
            for view in views
        ]


@router.get("/contractor", response_model=List[ContractorApplicationResponse])
async def list_contractor_applications(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_contractor)
):
    """The contractor dashboard: open applications and their shift state."""
    with performance_logger.log_operation_time("list_contractor_applications", user_id=str(current.user_id)):
        views = ApplicationService().contractor_applications(db, current.user_id)
        logger.info("Contractor applications listed", count=len(views), user_id=str(current.user_id))
        return [
            {"application": view.application, "shift_status": view.shift_status}
            for view in views
        ]


@router.post("/{application_id}/decision", response_model=ApplicationResponse)
async def decide_application(
    application_id: UUID,
    decision: ApplicationDecision,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_contractor)
):
    """Accept or reject an application."""
    with performance_logger.log_operation_time(
        "decide_application",
        user_id=str(current.user_id),
        application_id=str(application_id)
    ):
        return ApplicationService().decide(db, application_id, current.user_id, decision.status)


@router.get("/{application_id}/completion", response_model=CompletionResponse)
async def get_completion(
    application_id: UUID,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile)
):
    """Derived job-done flag for one application."""
    service = ApplicationService()
    application = service.get_application(db, application_id)
    ensure_application_party(application, current)
    completed = service.completion_flag(db, application_id)
    logger.info("Completion checked", application_id=str(application_id), completed=completed)
    return {"application_id": application_id, "completed": completed}
