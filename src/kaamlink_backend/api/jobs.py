"""Job board API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from kaamlink_backend.core.database import get_db
from kaamlink_backend.core.logging import performance_logger
from kaamlink_backend.auth.dependencies import get_current_profile, get_current_contractor
from kaamlink_backend.models.profile import Profile
from kaamlink_backend.schemas.job import JobCreate, JobResponse
from kaamlink_backend.services.job_service import JobService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    job_data: JobCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_contractor)
):
    """Post a new job as the authenticated contractor."""
    with performance_logger.log_operation_time("create_job", user_id=str(current.user_id)):
        job = JobService().create_job(
            db,
            contractor_id=current.user_id,
            title=job_data.title,
            description=job_data.description,
            location=job_data.location,
            wage=job_data.wage,
        )
        return job


@router.get("/available", response_model=List[JobResponse])
async def list_available_jobs(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile)
):
    """Jobs a worker can still apply to, newest first."""
    with performance_logger.log_operation_time("list_available_jobs", user_id=str(current.user_id)):
        jobs = JobService().available_jobs(db)
        logger.info("Available jobs listed", count=len(jobs), user_id=str(current.user_id))
        return jobs
