"""Skills API router for the caller's own skills.

This module provides endpoints for adding (single or batch), listing,
updating and deleting the skills that the skill-gap report compares against
job requirements.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ats.auth import get_current_user_id
from ats.database import get_db
from ats.models.skill import Skill
from ats.schemas.skill import (
    SkillBatchCreate,
    SkillBatchResponse,
    SkillCreate,
    SkillResponse,
    SkillUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/skills", tags=["skills"])


async def _find_by_name(db: AsyncSession, user_id: int, name: str) -> Skill | None:
    result = await db.execute(
        select(Skill).where(
            Skill.user_id == user_id,
            func.lower(Skill.name) == name.strip().lower(),
        )
    )
    return result.scalars().first()


async def _get_owned_skill(db: AsyncSession, user_id: int, skill_id: UUID) -> Skill:
    result = await db.execute(
        select(Skill).where(Skill.id == skill_id, Skill.user_id == user_id)
    )
    skill = result.scalar_one_or_none()
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")
    return skill


@router.post("", response_model=SkillResponse, status_code=201)
async def create_skill(
    request: SkillCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Add a skill.

    Raises:
        HTTPException: 409 if the caller already has a skill with this name
            (case-insensitive)
    """
    if await _find_by_name(db, user_id, request.name):
        raise HTTPException(status_code=409, detail="Duplicate skill")

    skill = Skill(
        user_id=user_id,
        name=request.name.strip(),
        category=request.category,
        proficiency=request.proficiency,
    )
    db.add(skill)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request inserted the same name first
        await db.rollback()
        raise HTTPException(status_code=409, detail="Duplicate skill")
    await db.refresh(skill)

    logger.info(f"User {user_id} added skill '{skill.name}'")
    return skill


@router.post("/batch", response_model=SkillBatchResponse, status_code=201)
async def batch_create_skills(
    request: SkillBatchCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Add multiple skills at once.

    Names already held by the caller (case-insensitive), including repeats
    within the batch, are skipped and counted.

    Args:
        request: Batch of skills to create
        user_id: Authenticated caller
        db: Database session

    Returns:
        SkillBatchResponse with creation statistics and skill IDs
    """
    total = len(request.skills)
    skill_ids = []
    skipped_count = 0
    seen: dict[str, Skill] = {}

    for skill_data in request.skills:
        key = skill_data.name.strip().lower()
        existing = seen.get(key) or await _find_by_name(db, user_id, key)

        if existing:
            skill_ids.append(existing.id)
            skipped_count += 1
            continue

        skill = Skill(
            user_id=user_id,
            name=skill_data.name.strip(),
            category=skill_data.category,
            proficiency=skill_data.proficiency,
        )
        db.add(skill)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise HTTPException(status_code=409, detail=f"Duplicate skill: {skill_data.name.strip()}")
        seen[key] = skill
        skill_ids.append(skill.id)

    await db.commit()

    logger.info(f"User {user_id} batch-added {total - skipped_count} skills ({skipped_count} skipped)")
    return SkillBatchResponse(
        created=total - skipped_count,
        skipped=skipped_count,
        total=total,
        skill_ids=skill_ids
    )


@router.get("", response_model=list[SkillResponse])
async def list_skills(
    category: str | None = Query(None, description="Filter by category"),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's skills ordered by category, then name."""
    query = select(Skill).where(Skill.user_id == user_id).order_by(Skill.category, Skill.name)

    if category:
        query = query.where(Skill.category == category)

    result = await db.execute(query)
    return result.scalars().all()


@router.put("/{skill_id}", response_model=SkillResponse)
async def update_skill(
    skill_id: UUID,
    request: SkillUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Update category and/or proficiency; omitted fields keep their value."""
    skill = await _get_owned_skill(db, user_id, skill_id)

    for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(skill, field, value)

    await db.commit()
    await db.refresh(skill)
    return skill


@router.delete("/{skill_id}", status_code=204)
async def delete_skill(
    skill_id: UUID,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Delete one of the caller's skills.

    Raises:
        HTTPException: 404 if skill not found
    """
    skill = await _get_owned_skill(db, user_id, skill_id)
    await db.delete(skill)
    await db.commit()
