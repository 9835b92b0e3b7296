"""
Tests for deadline urgency scoring.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from ats.models import Job
from ats.services.deadlines import (
    DeadlineUrgency,
    classify_urgency,
    days_in_stage,
    days_until_deadline,
    deadline_urgency,
    upcoming_deadlines,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_no_deadline_is_neutral():
    assert days_until_deadline(None, NOW) is None
    assert classify_urgency(None) is DeadlineUrgency.NEUTRAL
    assert DeadlineUrgency.NEUTRAL.color == "#9ca3af"


@pytest.mark.parametrize(
    "days_ahead, expected",
    [
        (2, DeadlineUrgency.URGENT),
        (3, DeadlineUrgency.WARNING),
        (7, DeadlineUrgency.WARNING),
        (8, DeadlineUrgency.SAFE),
    ],
)
def test_urgency_boundaries(days_ahead, expected):
    deadline = NOW + timedelta(days=days_ahead)
    assert days_until_deadline(deadline, NOW) == days_ahead
    assert deadline_urgency(deadline, NOW) is expected


def test_partial_days_round_up():
    assert days_until_deadline(NOW + timedelta(hours=1), NOW) == 1
    assert days_until_deadline(NOW + timedelta(days=2, minutes=1), NOW) == 3


def test_past_deadline_is_overdue():
    deadline = NOW - timedelta(days=3)
    assert days_until_deadline(deadline, NOW) == -3
    assert deadline_urgency(deadline, NOW) is DeadlineUrgency.OVERDUE


def test_deadline_today_is_urgent():
    assert classify_urgency(0) is DeadlineUrgency.URGENT


def test_date_deadline_is_midnight_utc():
    # 12h before midnight of the 12th -> 1.5 days -> rounds up to 2
    assert days_until_deadline(date(2025, 3, 12), NOW) == 2
    # Midnight of today already passed at noon
    assert days_until_deadline(date(2025, 3, 10), NOW) == 0


def test_naive_datetimes_are_treated_as_utc():
    naive_now = NOW.replace(tzinfo=None)
    assert days_until_deadline(naive_now + timedelta(days=5), NOW) == 5


def test_days_in_stage_never_negative():
    assert days_in_stage(NOW + timedelta(hours=5), None, NOW) == 0
    assert days_in_stage(NOW - timedelta(days=2, hours=1), None, NOW) == 3
    # Falls back to created_at when the stage timestamp is missing
    assert days_in_stage(None, NOW - timedelta(days=1), NOW) == 1
    assert days_in_stage(None, None, NOW) == 0


def test_upcoming_deadlines_sorted_soonest_first():
    jobs = [
        Job(title="Later", company="A", deadline=date(2025, 4, 1)),
        Job(title="None", company="B", deadline=None),
        Job(title="Sooner", company="C", deadline=date(2025, 3, 15)),
    ]
    result = upcoming_deadlines(jobs, limit=5)
    assert [job.title for job in result] == ["Sooner", "Later"]
    assert [job.title for job in upcoming_deadlines(jobs, limit=1)] == ["Sooner"]
