"""Deadline urgency scoring.

Pure helpers that turn a job's deadline into whole days remaining and an
urgency bucket the UI colors by. Thresholds are fixed:

    no deadline  -> neutral
    days < 0     -> overdue
    0 <= days <= 2 -> urgent
    3 <= days <= 7 -> warning
    days > 7     -> safe
"""

import math
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Iterable, Sequence

from ats.models import Job

SECONDS_PER_DAY = 86400


class DeadlineUrgency(str, Enum):
    """Urgency bucket for a deadline."""

    NEUTRAL = "neutral"
    OVERDUE = "overdue"
    URGENT = "urgent"
    WARNING = "warning"
    SAFE = "safe"

    @property
    def color(self) -> str:
        return URGENCY_COLORS[self]


URGENCY_COLORS = {
    DeadlineUrgency.NEUTRAL: "#9ca3af",  # gray
    DeadlineUrgency.OVERDUE: "#ef4444",  # red
    DeadlineUrgency.URGENT: "#f87171",  # red-orange
    DeadlineUrgency.WARNING: "#fbbf24",  # yellow
    DeadlineUrgency.SAFE: "#4ade80",  # green
}


def _as_utc(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    # A bare date means midnight UTC of that day
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def days_until_deadline(
    deadline: date | datetime | None,
    now: datetime | None = None,
) -> int | None:
    """Whole days until a deadline, rounded up.

    Args:
        deadline: Deadline date or datetime, or None when the job has none
        now: Reference time. Defaults to the current UTC time

    Returns:
        None when there is no deadline, otherwise
        ceil((deadline - now) / 1 day). Negative values mean the deadline
        has passed.

    Examples:
        >>> now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        >>> days_until_deadline(datetime(2025, 1, 3, tzinfo=timezone.utc), now)
        2
        >>> days_until_deadline(None, now) is None
        True
    """
    if deadline is None:
        return None
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    delta = _as_utc(deadline) - now
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def classify_urgency(days: int | None) -> DeadlineUrgency:
    """Map days-until-deadline onto an urgency bucket."""
    if days is None:
        return DeadlineUrgency.NEUTRAL
    if days < 0:
        return DeadlineUrgency.OVERDUE
    if days <= 2:
        return DeadlineUrgency.URGENT
    if days <= 7:
        return DeadlineUrgency.WARNING
    return DeadlineUrgency.SAFE


def deadline_urgency(
    deadline: date | datetime | None,
    now: datetime | None = None,
) -> DeadlineUrgency:
    return classify_urgency(days_until_deadline(deadline, now))


def days_in_stage(
    status_updated_at: datetime | None,
    created_at: datetime | None,
    now: datetime | None = None,
) -> int:
    """Whole days a job has sat in its current stage (never negative)."""
    since = status_updated_at or created_at
    if since is None:
        return 0
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    elapsed = (now - _as_utc(since)).total_seconds()
    return max(0, math.ceil(elapsed / SECONDS_PER_DAY))


def upcoming_deadlines(
    jobs: Iterable[Job],
    limit: int | None = None,
) -> Sequence[Job]:
    """Jobs that carry a deadline, soonest first."""
    dated = sorted(
        (job for job in jobs if job.deadline is not None),
        key=lambda job: job.deadline,
    )
    return dated[:limit] if limit is not None else dated
