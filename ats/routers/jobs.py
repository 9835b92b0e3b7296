"""Jobs API router.

This module provides REST endpoints for the application pipeline: job CRUD,
stage transitions, bulk deadline/status moves and LLM skill extraction.
All routes act on the authenticated caller's jobs only.
"""

import asyncio
import logging
from datetime import date
from uuid import UUID

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ats.auth import get_current_user_id
from ats.database import get_db
from ats.schemas.job import (
    BulkDeadlineResponse,
    BulkDeadlineUpdate,
    BulkStatusResponse,
    BulkStatusUpdate,
    DeadlineExtension,
    JobAnalysisResponse,
    JobCreate,
    JobDetailResponse,
    JobListResponse,
    JobResponse,
    JobStatusUpdate,
    JobUpdate,
    UpcomingDeadline,
)
from ats.services import pipeline
from ats.services.deadlines import days_until_deadline, upcoming_deadlines
from ats.services.job_analyzer import analyze_job
from ats.services.pipeline import JobFilters, JobNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])

JOB_NOT_FOUND = "Job not found"


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new job"
)
async def create_job(
    job_data: JobCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> JobResponse:
    """Create a job in the Interested stage.

    Raises:
        HTTPException 400: Title or company missing
        HTTPException 500: Database error
    """
    try:
        job = await pipeline.create_job(db, user_id, job_data.model_dump(exclude_unset=True))
        return JobResponse.model_validate(job)

    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to create job for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save job."
        )


@router.get(
    "",
    response_model=JobListResponse,
    summary="List jobs"
)
async def list_jobs(
    search: str | None = Query(None, description="Match title, company or description"),
    status_filter: str | None = Query(None, alias="status", description="Pipeline stage"),
    industry: str | None = Query(None),
    location: str | None = Query(None),
    salary_min: int | None = Query(None, alias="salaryMin", ge=0),
    salary_max: int | None = Query(None, alias="salaryMax", ge=0),
    date_from: date | None = Query(None, alias="dateFrom", description="Earliest deadline"),
    date_to: date | None = Query(None, alias="dateTo", description="Latest deadline"),
    sort_by: str = Query("date_added", alias="sortBy", description="date_added, deadline, salary or company"),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> JobListResponse:
    """List the caller's jobs with filtering and sorting (descending).

    Raises:
        HTTPException 500: Database error
    """
    filters = JobFilters(
        search=search,
        status=status_filter,
        industry=industry,
        location=location,
        salary_min=salary_min,
        salary_max=salary_max,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
    )
    try:
        jobs = await pipeline.list_jobs(db, user_id, filters)
        return JobListResponse(
            total=len(jobs),
            jobs=[JobResponse.model_validate(job) for job in jobs],
        )

    except Exception as e:
        logger.error(f"Failed to list jobs for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error"
        )


@router.get(
    "/deadlines/upcoming",
    response_model=list[UpcomingDeadline],
    summary="Jobs with deadlines, soonest first"
)
async def list_upcoming_deadlines(
    limit: int = Query(5, ge=1, le=100),
    include_overdue: bool = Query(True, description="Keep deadlines that have passed"),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> list[UpcomingDeadline]:
    """Feed for the upcoming-deadlines widget."""
    try:
        jobs = await pipeline.list_jobs(db, user_id, JobFilters(sort_by="deadline"))
    except Exception as e:
        logger.error(f"Failed to load deadlines for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error"
        )

    if not include_overdue:
        jobs = [job for job in jobs if (days_until_deadline(job.deadline) or 0) >= 0]
    return [UpcomingDeadline.model_validate(job) for job in upcoming_deadlines(jobs, limit)]


@router.put(
    "/bulk/deadline",
    response_model=BulkDeadlineResponse,
    summary="Extend deadlines of several jobs"
)
async def bulk_extend_deadlines(
    request: BulkDeadlineUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> BulkDeadlineResponse:
    """Shift deadlines by ``daysToAdd`` days for the caller's jobs in ``jobIds``.

    Ids that are not the caller's are skipped, so the response can list fewer
    jobs than requested (or none).

    Raises:
        HTTPException 400: Empty id list or zero day delta
        HTTPException 500: Database error
    """
    try:
        jobs = await pipeline.extend_deadlines(db, user_id, request.job_ids, request.days_to_add)
        return BulkDeadlineResponse(
            updated=[DeadlineExtension.model_validate(job) for job in jobs]
        )

    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        await db.rollback()
        logger.error(f"Bulk deadline update failed for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error"
        )


@router.put(
    "/bulk/status",
    response_model=BulkStatusResponse,
    summary="Move several jobs to one stage"
)
async def bulk_update_status(
    request: BulkStatusUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> BulkStatusResponse:
    """Move the caller's jobs in ``jobIds`` to ``status``."""
    try:
        jobs = await pipeline.bulk_update_status(db, user_id, request.job_ids, request.status)
        return BulkStatusResponse(updated=[JobResponse.model_validate(job) for job in jobs])

    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        await db.rollback()
        logger.error(f"Bulk status update failed for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error"
        )


@router.get(
    "/{job_id}",
    response_model=JobDetailResponse,
    summary="Get a specific job"
)
async def get_job(
    job_id: UUID,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> JobDetailResponse:
    """Get one of the caller's jobs with its stage history.

    Raises:
        HTTPException 404: Job not found (or owned by someone else)
        HTTPException 500: Database error
    """
    try:
        job = await pipeline.get_job(db, job_id, user_id)
        return JobDetailResponse.model_validate(job)

    except JobNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=JOB_NOT_FOUND)
    except Exception as e:
        logger.error(f"Failed to get job {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error"
        )


@router.put(
    "/{job_id}",
    response_model=JobResponse,
    summary="Update job fields"
)
async def update_job(
    job_id: UUID,
    request: JobUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> JobResponse:
    """Partially update a job. Unknown fields in the body are ignored.

    Raises:
        HTTPException 400: No updatable field supplied, or invalid status
        HTTPException 404: Job not found (or owned by someone else)
        HTTPException 500: Database error
    """
    try:
        job = await pipeline.update_job(
            db, job_id, user_id, request.model_dump(exclude_unset=True)
        )
        return JobResponse.model_validate(job)

    except JobNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=JOB_NOT_FOUND)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to update job {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database update failed"
        )


@router.put(
    "/{job_id}/status",
    response_model=JobResponse,
    summary="Move a job to another stage"
)
async def update_job_status(
    job_id: UUID,
    request: JobStatusUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> JobResponse:
    """Status-only transition; always stamps status_updated_at and logs history.

    Raises:
        HTTPException 400: Status is not a pipeline stage
        HTTPException 404: Job not found (or owned by someone else)
        HTTPException 500: Database error
    """
    try:
        job = await pipeline.update_status(db, job_id, user_id, request.status)
        return JobResponse.model_validate(job)

    except JobNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=JOB_NOT_FOUND)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to update status of job {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update status"
        )


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a job"
)
async def delete_job(
    job_id: UUID,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> None:
    """Permanently delete a job.

    Raises:
        HTTPException 404: Job not found (or owned by someone else)
        HTTPException 500: Database error
    """
    try:
        await pipeline.delete_job(db, job_id, user_id)

    except JobNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=JOB_NOT_FOUND)
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to delete job {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete job"
        )


@router.post(
    "/{job_id}/analyze",
    response_model=JobAnalysisResponse,
    summary="Extract required skills from the description"
)
async def analyze_job_description(
    job_id: UUID,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> JobAnalysisResponse:
    """Use the LLM to fill the job's required skills.

    Raises:
        HTTPException 404: Job not found (or owned by someone else)
        HTTPException 422: No description, or model output could not be parsed
        HTTPException 503: Ollama unreachable
        HTTPException 504: Ollama timed out
        HTTPException 500: Any other failure
    """
    try:
        job = await pipeline.get_job(db, job_id, user_id)
        job = await analyze_job(job, db)
        return JobAnalysisResponse(job_id=job.id, required_skills=job.required_skills or [])

    except JobNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=JOB_NOT_FOUND)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.error(f"Skill extraction timed out for job {job_id}")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Ollama request timed out. Ensure Ollama is running and responsive."
        )
    except httpx.HTTPError as e:
        logger.error(f"Ollama unavailable while analyzing job {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Ollama unavailable. Ensure Ollama service is running."
        )
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to analyze job {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Job analysis failed"
        )
