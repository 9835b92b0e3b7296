"""Learning progress endpoints for skills surfaced by the gap report."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ats.auth import get_current_user_id
from ats.database import get_db
from ats.models import SkillProgress
from ats.models.base import utcnow
from ats.schemas.skill import SkillProgressResponse, SkillProgressUpdate
from ats.services.skills_gap import normalize_skill

router = APIRouter(prefix="/api/skill-progress", tags=["skill-progress"])


@router.get("", response_model=list[SkillProgressResponse])
async def list_progress(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """All progress entries for the caller, most recently updated first."""
    result = await db.execute(
        select(SkillProgress)
        .where(SkillProgress.user_id == user_id)
        .order_by(SkillProgress.updated_at.desc())
    )
    return result.scalars().all()


@router.put("/{skill}", response_model=SkillProgressResponse)
async def upsert_progress(
    skill: str,
    request: SkillProgressUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create or update the caller's progress on a skill (name is normalized)."""
    name = normalize_skill(skill)
    result = await db.execute(
        select(SkillProgress).where(
            SkillProgress.user_id == user_id,
            SkillProgress.skill == name,
        )
    )
    entry = result.scalar_one_or_none()

    if entry is None:
        entry = SkillProgress(user_id=user_id, skill=name, status=request.status)
        db.add(entry)
    else:
        entry.status = request.status
        entry.updated_at = utcnow()

    await db.commit()
    await db.refresh(entry)
    return entry
