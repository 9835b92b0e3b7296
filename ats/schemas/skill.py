"""Pydantic schemas for user skills, learning progress and skill-gap reports."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ProgressStatus = Literal["not started", "in progress", "completed"]


class SkillCreate(BaseModel):
    """Schema for adding a single skill."""

    name: str = Field(..., min_length=1, max_length=255, description="Skill name (e.g., 'Python', 'FastAPI')")
    category: str | None = Field(None, max_length=100, description="Skill category (e.g., 'language', 'framework')")
    proficiency: int | None = Field(None, ge=0, le=5, description="Self-rated level; higher is stronger")


class SkillBatchCreate(BaseModel):
    """Schema for batch creating multiple skills."""

    skills: list[SkillCreate] = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="List of skills to create (1-1000)"
    )


class SkillUpdate(BaseModel):
    """Only category and proficiency can change; the name is the identity."""

    category: str | None = Field(None, max_length=100)
    proficiency: int | None = Field(None, ge=0, le=5)


class SkillResponse(BaseModel):
    """Schema for skill response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    category: str | None
    proficiency: int | None
    created_at: datetime


class SkillBatchResponse(BaseModel):
    """Schema for batch create response."""

    created: int = Field(description="Number of new skills created")
    skipped: int = Field(description="Number of duplicate skills skipped")
    total: int = Field(description="Total skills in request")
    skill_ids: list[UUID] = Field(description="IDs of all skills (created + existing)")


class SkillProgressUpdate(BaseModel):
    status: ProgressStatus


class SkillProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    skill: str
    status: str
    updated_at: datetime


class SkillLevelResponse(BaseModel):
    skill: str
    level: int


class PriorityEntryResponse(BaseModel):
    skill: str
    status: Literal["matched", "weak", "missing"]
    current_level: int
    priority: int = Field(ge=1, le=5)


class SkillGapResponse(BaseModel):
    """Skill-gap report for one job."""

    job_id: UUID
    user_id: int
    matched_skills: list[SkillLevelResponse]
    weak_skills: list[SkillLevelResponse]
    missing_skills: list[str]
    learning_resources: dict[str, list[dict[str, Any]]]
    priority_list: list[PriorityEntryResponse]
