"""Job pipeline service: stage transitions, field updates and bulk operations.

Every query here is scoped by ``user_id``. A job that exists but belongs to
someone else is reported exactly like a job that does not exist, so callers
cannot probe for other users' data.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ats.models import ApplicationEvent, Job
from ats.models.base import utcnow
from ats.services.skills_gap import normalize_skill

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    """The six pipeline stages, in board order."""

    INTERESTED = "Interested"
    APPLIED = "Applied"
    PHONE_SCREEN = "Phone Screen"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    REJECTED = "Rejected"


STAGES = [stage.value for stage in JobStatus]

UPDATABLE_FIELDS = frozenset({
    "title",
    "company",
    "location",
    "status",
    "salary_min",
    "salary_max",
    "deadline",
    "description",
    "industry",
    "type",
    "notes",
    "contact_name",
    "contact_email",
    "contact_phone",
    "salary_notes",
    "interview_feedback",
})

SORT_COLUMNS = {
    "date_added": Job.created_at,
    "deadline": Job.deadline,
    "salary": Job.salary_max,
    "company": Job.company,
}


class JobNotFoundError(LookupError):
    """Job is absent or not owned by the caller (deliberately indistinguishable)."""

    def __init__(self, job_id: UUID):
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class InvalidStatusError(ValueError):
    """Status is not one of the six pipeline stages."""

    def __init__(self, value: Any):
        super().__init__(
            f"Invalid status {value!r}. Must be one of: {', '.join(STAGES)}"
        )
        self.value = value


def parse_status(value: Any) -> JobStatus:
    """Return the stage for ``value`` or raise InvalidStatusError."""
    if isinstance(value, JobStatus):
        return value
    try:
        return JobStatus(value)
    except ValueError:
        raise InvalidStatusError(value)


def match_stage(value: str | None) -> JobStatus | None:
    """Case-insensitive stage lookup used by list filters; None when unknown."""
    if not value:
        return None
    wanted = value.strip().lower()
    for stage in JobStatus:
        if stage.value.lower() == wanted:
            return stage
    return None


@dataclass
class JobFilters:
    """Query options for listing a user's jobs."""

    search: str | None = None
    status: str | None = None
    industry: str | None = None
    location: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    date_from: date | None = None
    date_to: date | None = None
    sort_by: str = "date_added"


def normalize_skill_list(skills: Iterable[str]) -> list[str]:
    """Normalized skill names in first-seen order, blanks and repeats dropped."""
    normalized: list[str] = []
    for skill in skills:
        name = normalize_skill(skill)
        if name and name not in normalized:
            normalized.append(name)
    return normalized


def _record_status_change(db: AsyncSession, job: Job) -> None:
    db.add(ApplicationEvent(job_id=job.id, event=f'Status changed to "{job.status}"'))


async def _get_owned_job(db: AsyncSession, job_id: UUID, owner_id: int) -> Job:
    result = await db.execute(
        select(Job).where(Job.id == job_id, Job.user_id == owner_id)
    )
    job = result.scalar_one_or_none()
    if job is None:
        raise JobNotFoundError(job_id)
    return job


async def create_job(db: AsyncSession, owner_id: int, data: dict[str, Any]) -> Job:
    """Create a job for ``owner_id``. New jobs always start at Interested.

    Raises:
        ValueError: When title or company is missing
    """
    if not data.get("title") or not data.get("company"):
        raise ValueError("Title and company are required.")

    fields = {key: value for key, value in data.items() if key != "status"}
    if fields.get("required_skills"):
        fields["required_skills"] = normalize_skill_list(fields["required_skills"])
    if fields.get("applied_on") is None:
        fields["applied_on"] = date.today()

    now = utcnow()
    job = Job(
        **fields,
        user_id=owner_id,
        status=JobStatus.INTERESTED.value,
        status_updated_at=now,
        created_at=now,
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)

    logger.info(f"Created job {job.id} for user {owner_id}: {job.title} at {job.company}")
    return job


async def get_job(db: AsyncSession, job_id: UUID, owner_id: int) -> Job:
    """Fetch one job owned by the caller, with its stage history loaded."""
    return await _get_owned_job(db, job_id, owner_id)


async def list_jobs(
    db: AsyncSession,
    owner_id: int,
    filters: JobFilters | None = None,
) -> Sequence[Job]:
    """List the caller's jobs with optional filters, newest first by default.

    The status filter only applies when it names a known stage; unknown values
    are ignored rather than returning nothing.
    """
    filters = filters or JobFilters()
    query = select(Job).where(Job.user_id == owner_id)

    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(
            or_(
                Job.title.ilike(pattern),
                Job.company.ilike(pattern),
                Job.description.ilike(pattern),
            )
        )

    stage = match_stage(filters.status)
    if stage is not None:
        query = query.where(Job.status == stage.value)

    if filters.industry:
        query = query.where(Job.industry.ilike(f"%{filters.industry}%"))
    if filters.location:
        query = query.where(Job.location.ilike(f"%{filters.location}%"))
    if filters.salary_min is not None:
        query = query.where(Job.salary_min >= filters.salary_min)
    if filters.salary_max is not None:
        query = query.where(Job.salary_max <= filters.salary_max)
    if filters.date_from is not None:
        query = query.where(Job.deadline >= filters.date_from)
    if filters.date_to is not None:
        query = query.where(Job.deadline <= filters.date_to)

    order_column = SORT_COLUMNS.get(filters.sort_by, Job.created_at)
    query = query.order_by(order_column.desc(), Job.created_at.desc())

    result = await db.execute(query)
    return result.scalars().all()


async def update_job(
    db: AsyncSession,
    job_id: UUID,
    owner_id: int,
    fields: dict[str, Any],
) -> Job:
    """Apply a partial update restricted to UPDATABLE_FIELDS.

    Keys outside the allow-list are dropped silently. ``status_updated_at``
    is refreshed only when the update carries a status that differs from the
    stored one.

    Raises:
        ValueError: When no allow-listed field is present
        InvalidStatusError: When the status is not a pipeline stage
        JobNotFoundError: When the caller does not own the job
    """
    updates = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS}
    if not updates:
        raise ValueError("No valid fields to update")

    if "status" in updates:
        updates["status"] = parse_status(updates["status"]).value

    job = await _get_owned_job(db, job_id, owner_id)

    status_changed = "status" in updates and updates["status"] != job.status
    for field_name, value in updates.items():
        setattr(job, field_name, value)

    if status_changed:
        job.status_updated_at = utcnow()
        _record_status_change(db, job)

    await db.commit()
    await db.refresh(job)

    logger.info(
        f"Updated job {job_id} for user {owner_id}: {sorted(updates)}"
        + (f" (status -> {job.status})" if status_changed else "")
    )
    return job


async def update_status(
    db: AsyncSession,
    job_id: UUID,
    owner_id: int,
    new_status: Any,
) -> Job:
    """Move a job to another stage.

    Every accepted call stamps ``status_updated_at`` and writes a history
    event; no other field is touched.

    Raises:
        InvalidStatusError: When the status is not a pipeline stage
        JobNotFoundError: When the caller does not own the job
    """
    stage = parse_status(new_status)
    job = await _get_owned_job(db, job_id, owner_id)

    job.status = stage.value
    job.status_updated_at = utcnow()
    _record_status_change(db, job)

    await db.commit()
    await db.refresh(job)

    logger.info(f"Job {job_id} for user {owner_id} moved to {stage.value}")
    return job


async def delete_job(db: AsyncSession, job_id: UUID, owner_id: int) -> None:
    """Hard-delete a job (history rows cascade)."""
    job = await _get_owned_job(db, job_id, owner_id)
    await db.delete(job)
    await db.commit()
    logger.info(f"Deleted job {job_id} for user {owner_id}")


async def _get_owned_jobs(
    db: AsyncSession,
    owner_id: int,
    job_ids: Iterable[UUID],
) -> Sequence[Job]:
    result = await db.execute(
        select(Job)
        .where(Job.user_id == owner_id, Job.id.in_(list(job_ids)))
        .order_by(Job.created_at)
    )
    return result.scalars().all()


async def extend_deadlines(
    db: AsyncSession,
    owner_id: int,
    job_ids: list[UUID],
    days_to_add: int,
) -> Sequence[Job]:
    """Shift the deadline of every owned job in ``job_ids`` by ``days_to_add``.

    Ids the caller does not own are skipped without error. A job without a
    deadline keeps no deadline. Touched jobs also get ``status_updated_at``
    refreshed, as the board has always done for bulk deadline moves.

    Raises:
        ValueError: When job_ids is empty or days_to_add is zero or not an int
    """
    if not job_ids:
        raise ValueError("No job IDs provided")
    if isinstance(days_to_add, bool) or not isinstance(days_to_add, int) or days_to_add == 0:
        raise ValueError("Invalid daysToAdd")

    jobs = await _get_owned_jobs(db, owner_id, job_ids)
    if not jobs:
        logger.info(f"Bulk deadline update for user {owner_id} matched no jobs")
        return []

    now = utcnow()
    shift = timedelta(days=days_to_add)
    for job in jobs:
        if job.deadline is not None:
            job.deadline = job.deadline + shift
        job.status_updated_at = now

    await db.commit()

    logger.info(
        f"Extended deadlines by {days_to_add} days for {len(jobs)} of "
        f"{len(job_ids)} requested jobs (user {owner_id})"
    )
    return jobs


async def bulk_update_status(
    db: AsyncSession,
    owner_id: int,
    job_ids: list[UUID],
    new_status: Any,
) -> Sequence[Job]:
    """Move every owned job in ``job_ids`` to ``new_status``.

    Raises:
        ValueError: When job_ids is empty
        InvalidStatusError: When the status is not a pipeline stage
    """
    if not job_ids:
        raise ValueError("No job IDs provided")
    stage = parse_status(new_status)

    jobs = await _get_owned_jobs(db, owner_id, job_ids)
    now = utcnow()
    for job in jobs:
        job.status = stage.value
        job.status_updated_at = now
        _record_status_change(db, job)

    await db.commit()
    for job in jobs:
        await db.refresh(job)

    logger.info(f"Moved {len(jobs)} jobs to {stage.value} (user {owner_id})")
    return jobs


async def set_required_skills(db: AsyncSession, job: Job, skills: Iterable[str]) -> Job:
    """Replace a job's required skills with their normalized, de-duplicated names."""
    job.required_skills = normalize_skill_list(skills)
    await db.commit()
    await db.refresh(job)
    return job
