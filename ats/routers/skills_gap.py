"""Skill-gap report endpoint."""

import logging
from functools import lru_cache
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ats.auth import get_current_user_id
from ats.config import settings
from ats.database import get_db
from ats.models import Skill
from ats.schemas.skill import SkillGapResponse
from ats.services import pipeline
from ats.services.pipeline import JobNotFoundError
from ats.services.skills_gap import LearningResources, UserSkillLevel, compute_gap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/skills-gap", tags=["skills-gap"])


@lru_cache(maxsize=1)
def get_learning_resources() -> LearningResources:
    """Resource table, loaded once per process."""
    return LearningResources.from_file(settings.learning_resources_path)


@router.get("/{job_id}", response_model=SkillGapResponse)
async def get_skill_gap(
    job_id: UUID,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    resources: LearningResources = Depends(get_learning_resources),
) -> SkillGapResponse:
    """Compare the caller's skills with a job's required skills.

    Raises:
        HTTPException 404: Job not found (or owned by someone else)
        HTTPException 500: Database error
    """
    try:
        job = await pipeline.get_job(db, job_id, user_id)

        result = await db.execute(
            select(Skill.name, Skill.proficiency).where(Skill.user_id == user_id)
        )
        user_skills = [
            UserSkillLevel(name=name, level=proficiency or 0)
            for name, proficiency in result.all()
        ]

    except JobNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    except Exception as e:
        logger.error(f"Skills gap calculation failed for job {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Skills gap calculation failed"
        )

    required = job.required_skills or []
    gap = compute_gap(user_skills, required).to_dict()

    return SkillGapResponse(
        job_id=job.id,
        user_id=user_id,
        matched_skills=gap["matched"],
        weak_skills=gap["weak"],
        missing_skills=gap["missing"],
        learning_resources=resources.for_skills(required),
        priority_list=gap["priority_list"],
    )
