"""Job-related Pydantic schemas.

This module defines request and response schemas for Job endpoints,
including pipeline transitions, bulk operations and skill extraction results.
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from ats.services.deadlines import (
    DeadlineUrgency,
    classify_urgency,
    days_in_stage,
    days_until_deadline,
)
from ats.services.pipeline import JobStatus
from ats.utils.salary import parse_salary


class JobCreate(BaseModel):
    """Schema for creating a new job. Status is not accepted; jobs start at Interested."""

    title: str | None = Field(None, max_length=255)
    company: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)
    salary_min: int | None = None
    salary_max: int | None = None
    url: str | None = None
    deadline: date | None = None
    description: str | None = None
    industry: str | None = Field(None, max_length=255)
    type: str | None = Field(None, max_length=100)
    applied_on: date | None = None
    required_skills: list[str] | None = None

    @field_validator("salary_min", "salary_max", mode="before")
    @classmethod
    def clean_salary(cls, value):
        return parse_salary(value)


class JobUpdate(BaseModel):
    """Schema for partial job updates.

    Only the fields declared here can be changed; anything else in the body
    is ignored.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    company: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, max_length=255)
    status: JobStatus | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    deadline: date | None = None
    description: str | None = None
    industry: str | None = Field(None, max_length=255)
    type: str | None = Field(None, max_length=100)
    notes: str | None = None
    contact_name: str | None = Field(None, max_length=255)
    contact_email: str | None = Field(None, max_length=255)
    contact_phone: str | None = Field(None, max_length=50)
    salary_notes: str | None = None
    interview_feedback: str | None = None

    @field_validator("salary_min", "salary_max", mode="before")
    @classmethod
    def clean_salary(cls, value):
        return parse_salary(value)

    @field_validator("title", "company", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class JobStatusUpdate(BaseModel):
    """Schema for a status-only transition."""

    status: JobStatus


class BulkDeadlineUpdate(BaseModel):
    """Body of PUT /api/jobs/bulk/deadline."""

    model_config = ConfigDict(populate_by_name=True)

    job_ids: list[UUID] = Field(..., alias="jobIds", min_length=1)
    days_to_add: int = Field(..., alias="daysToAdd")

    @field_validator("days_to_add", mode="before")
    @classmethod
    def not_bool(cls, value: Any) -> Any:
        # Lax int parsing would otherwise read true as 1
        if isinstance(value, bool):
            raise ValueError("daysToAdd must be an integer")
        return value

    @field_validator("days_to_add")
    @classmethod
    def non_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("daysToAdd must be a non-zero integer")
        return value


class BulkStatusUpdate(BaseModel):
    """Body of PUT /api/jobs/bulk/status."""

    model_config = ConfigDict(populate_by_name=True)

    job_ids: list[UUID] = Field(..., alias="jobIds", min_length=1)
    status: JobStatus


class ApplicationEventResponse(BaseModel):
    """One entry of a job's stage history."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event: str
    timestamp: datetime


class JobResponse(BaseModel):
    """Schema for job response with derived deadline and stage metrics."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: int
    title: str
    company: str
    location: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    url: str | None = None
    deadline: date | None = None
    description: str | None = None
    industry: str | None = None
    type: str | None = None
    applied_on: date | None = None
    required_skills: list[str] | None = None
    notes: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    salary_notes: str | None = None
    interview_feedback: str | None = None
    status: str
    status_updated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def days_until_deadline(self) -> int | None:
        return days_until_deadline(self.deadline)

    @computed_field
    @property
    def deadline_urgency(self) -> DeadlineUrgency:
        return classify_urgency(self.days_until_deadline)

    @computed_field
    @property
    def days_in_stage(self) -> int:
        return days_in_stage(self.status_updated_at, self.created_at)


class JobDetailResponse(JobResponse):
    """Single job with its stage history, newest first."""

    history: list[ApplicationEventResponse] = []


class JobListResponse(BaseModel):
    """Schema for job list response."""

    total: int
    jobs: list[JobResponse]


class DeadlineExtension(BaseModel):
    """A job touched by a bulk deadline extension."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    deadline: date | None = None


class BulkDeadlineResponse(BaseModel):
    updated: list[DeadlineExtension]


class BulkStatusResponse(BaseModel):
    updated: list[JobResponse]


class UpcomingDeadline(BaseModel):
    """Entry of the upcoming-deadlines widget."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    company: str
    status: str
    deadline: date

    @computed_field
    @property
    def days_until_deadline(self) -> int | None:
        return days_until_deadline(self.deadline)

    @computed_field
    @property
    def urgency(self) -> DeadlineUrgency:
        return classify_urgency(self.days_until_deadline)

    @computed_field
    @property
    def color(self) -> str:
        return self.urgency.color


class ParsedJobSkills(BaseModel):
    """Schema for hard skills extracted from a job description by the LLM.

    Used by job_analyzer.py service for validation.
    """

    hard_skills: list[str] = Field(
        ...,
        min_length=1,
        description="Technical/hard skills only (no soft skills)"
    )


class JobAnalysisResponse(BaseModel):
    """Schema for job analysis result."""

    job_id: UUID
    required_skills: list[str]
