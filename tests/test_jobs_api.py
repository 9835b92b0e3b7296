"""
Tests for the job pipeline endpoints.
"""
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from sqlalchemy import select

from ats.models import ApplicationEvent, Job
from conftest import OTHER_USER_ID, OWNER_ID

OLD_STAMP = datetime(2020, 1, 1, tzinfo=timezone.utc)


def _stamp(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=None)


async def test_list_is_empty_for_new_user(client, owner_headers):
    res = await client.get("/api/jobs", headers=owner_headers)
    assert res.status_code == 200
    assert res.json() == {"total": 0, "jobs": []}


async def test_create_requires_title_and_company(client, owner_headers):
    res = await client.post("/api/jobs", json={"company": "A Company"}, headers=owner_headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Title and company are required."


async def test_create_forces_interested_status(client, owner_headers):
    res = await client.post(
        "/api/jobs",
        json={
            "title": "Eng",
            "company": "Acme",
            "status": "Offer",
            "salary_min": "$90,000",
            "salary_max": "120000",
            "required_skills": [" Python ", "SQL"],
        },
        headers=owner_headers,
    )
    assert res.status_code == 201
    job = res.json()
    assert job["status"] == "Interested"
    assert job["user_id"] == OWNER_ID
    assert job["salary_min"] == 90000
    assert job["salary_max"] == 120000
    assert job["required_skills"] == ["python", "sql"]
    assert job["days_until_deadline"] is None
    assert job["deadline_urgency"] == "neutral"
    assert job["days_in_stage"] <= 1


async def test_create_dedupes_required_skills(client, owner_headers):
    res = await client.post(
        "/api/jobs",
        json={"title": "Eng", "company": "Acme", "required_skills": ["Python", " python", "", "SQL"]},
        headers=owner_headers,
    )
    assert res.status_code == 201
    assert res.json()["required_skills"] == ["python", "sql"]


async def test_update_ignores_unknown_fields(client, owner_headers, make_job):
    job = await make_job()
    res = await client.put(
        f"/api/jobs/{job.id}",
        json={"title": "Senior Engineer", "user_id": OTHER_USER_ID, "required_skills": ["x"]},
        headers=owner_headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["title"] == "Senior Engineer"
    assert body["user_id"] == OWNER_ID
    assert body["required_skills"] is None


async def test_update_with_no_allowed_fields_fails(client, owner_headers, make_job):
    job = await make_job()
    res = await client.put(f"/api/jobs/{job.id}", json={"bogus": 1}, headers=owner_headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "No valid fields to update"


async def test_update_rejects_null_title(client, owner_headers, make_job):
    job = await make_job()
    res = await client.put(f"/api/jobs/{job.id}", json={"title": None}, headers=owner_headers)
    assert res.status_code == 400


async def test_status_timestamp_only_moves_on_status_change(client, owner_headers, make_job, db):
    job = await make_job(status="Applied", status_updated_at=OLD_STAMP)

    # Other fields, or the same status, leave the timestamp alone
    res = await client.put(
        f"/api/jobs/{job.id}",
        json={"notes": "recruiter replied", "status": "Applied"},
        headers=owner_headers,
    )
    assert res.status_code == 200
    assert _stamp(res.json()["status_updated_at"]) == OLD_STAMP.replace(tzinfo=None)

    # A different status refreshes it and logs history
    res = await client.put(f"/api/jobs/{job.id}", json={"status": "Interview"}, headers=owner_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "Interview"
    assert _stamp(res.json()["status_updated_at"]) > OLD_STAMP.replace(tzinfo=None)

    events = (await db.execute(select(ApplicationEvent).where(ApplicationEvent.job_id == job.id))).scalars().all()
    assert [e.event for e in events] == ['Status changed to "Interview"']


async def test_status_route_updates_and_logs(client, owner_headers, make_job):
    job = await make_job(status_updated_at=OLD_STAMP)

    res = await client.put(f"/api/jobs/{job.id}/status", json={"status": "Applied"}, headers=owner_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "Applied"
    assert _stamp(res.json()["status_updated_at"]) > OLD_STAMP.replace(tzinfo=None)

    detail = (await client.get(f"/api/jobs/{job.id}", headers=owner_headers)).json()
    assert [h["event"] for h in detail["history"]] == ['Status changed to "Applied"']


async def test_invalid_status_is_rejected(client, owner_headers, make_job):
    job = await make_job()
    res = await client.put(f"/api/jobs/{job.id}/status", json={"status": "Ghosted"}, headers=owner_headers)
    assert res.status_code == 400

    res = await client.put(f"/api/jobs/{job.id}", json={"status": "Ghosted"}, headers=owner_headers)
    assert res.status_code == 400

    detail = (await client.get(f"/api/jobs/{job.id}", headers=owner_headers)).json()
    assert detail["status"] == "Interested"


async def test_other_users_job_is_not_found(client, owner_headers, make_job, db):
    victim = await make_job(user_id=OTHER_USER_ID, title="Victim Job", company="Victim Co")

    requests = [
        client.get(f"/api/jobs/{victim.id}", headers=owner_headers),
        client.put(f"/api/jobs/{victim.id}", json={"title": "Pwned"}, headers=owner_headers),
        client.put(f"/api/jobs/{victim.id}/status", json={"status": "Rejected"}, headers=owner_headers),
        client.delete(f"/api/jobs/{victim.id}", headers=owner_headers),
    ]
    for pending in requests:
        res = await pending
        assert res.status_code == 404
        assert res.json()["detail"] == "Job not found"

    stored = (await db.execute(select(Job).where(Job.id == victim.id))).scalar_one()
    assert stored.title == "Victim Job"
    assert stored.status == "Interested"


async def test_unknown_job_is_not_found(client, owner_headers):
    res = await client.get(f"/api/jobs/{uuid4()}", headers=owner_headers)
    assert res.status_code == 404


async def test_delete_job(client, owner_headers, make_job):
    job = await make_job()
    res = await client.delete(f"/api/jobs/{job.id}", headers=owner_headers)
    assert res.status_code == 204
    assert (await client.get(f"/api/jobs/{job.id}", headers=owner_headers)).status_code == 404


async def test_list_filters_and_sorting(client, owner_headers, make_job):
    await make_job(title="Data Engineer", company="Beta", industry="Finance", salary_min=80000,
                   salary_max=100000, deadline=date(2030, 5, 1), status="Applied")
    await make_job(title="Frontend Dev", company="Alpha", industry="Media", location="Remote",
                   salary_min=60000, salary_max=70000, deadline=date(2030, 1, 1))
    await make_job(user_id=OTHER_USER_ID, title="Data Scientist", company="Gamma")

    async def titles(**params):
        res = await client.get("/api/jobs", params=params, headers=owner_headers)
        assert res.status_code == 200
        return [job["title"] for job in res.json()["jobs"]]

    assert await titles(search="data") == ["Data Engineer"]
    assert await titles(status="applied") == ["Data Engineer"]
    # Unknown stages do not filter
    assert len(await titles(status="Ghosted")) == 2
    assert await titles(industry="fin") == ["Data Engineer"]
    assert await titles(location="remote") == ["Frontend Dev"]
    assert await titles(salaryMin=75000) == ["Data Engineer"]
    assert await titles(salaryMax=75000) == ["Frontend Dev"]
    assert await titles(dateFrom="2030-02-01") == ["Data Engineer"]
    assert await titles(dateTo="2030-02-01") == ["Frontend Dev"]
    assert await titles(sortBy="company") == ["Data Engineer", "Frontend Dev"]
    assert await titles(sortBy="deadline") == ["Data Engineer", "Frontend Dev"]
    assert await titles(sortBy="salary") == ["Data Engineer", "Frontend Dev"]


async def test_bulk_extend_deadlines(client, owner_headers, make_job, db):
    first = await make_job(deadline=date(2030, 1, 10), status_updated_at=OLD_STAMP)
    second = await make_job(deadline=date(2030, 2, 1))
    victim = await make_job(user_id=OTHER_USER_ID, deadline=date(2030, 1, 10))

    res = await client.put(
        "/api/jobs/bulk/deadline",
        json={"jobIds": [str(first.id), str(second.id), str(victim.id)], "daysToAdd": 7},
        headers=owner_headers,
    )
    assert res.status_code == 200
    updated = {row["id"]: row["deadline"] for row in res.json()["updated"]}
    assert updated == {str(first.id): "2030-01-17", str(second.id): "2030-02-08"}

    stored_victim = (await db.execute(select(Job).where(Job.id == victim.id))).scalar_one()
    assert stored_victim.deadline == date(2030, 1, 10)

    detail = (await client.get(f"/api/jobs/{first.id}", headers=owner_headers)).json()
    assert _stamp(detail["status_updated_at"]) > OLD_STAMP.replace(tzinfo=None)


async def test_bulk_extend_disjoint_ids_is_a_noop(client, owner_headers, make_job, db):
    victim = await make_job(user_id=OTHER_USER_ID, deadline=date(2030, 1, 10))

    res = await client.put(
        "/api/jobs/bulk/deadline",
        json={"jobIds": [str(victim.id), str(uuid4())], "daysToAdd": -3},
        headers=owner_headers,
    )
    assert res.status_code == 200
    assert res.json() == {"updated": []}

    stored = (await db.execute(select(Job).where(Job.id == victim.id))).scalar_one()
    assert stored.deadline == date(2030, 1, 10)


async def test_bulk_extend_validation(client, owner_headers, make_job):
    job = await make_job()
    bad_bodies = [
        {"jobIds": [], "daysToAdd": 3},
        {"jobIds": [str(job.id)], "daysToAdd": 0},
        {"jobIds": [str(job.id)], "daysToAdd": "soon"},
        {"jobIds": [str(job.id)], "daysToAdd": True},
        {"jobIds": [str(job.id)]},
    ]
    for body in bad_bodies:
        res = await client.put("/api/jobs/bulk/deadline", json=body, headers=owner_headers)
        assert res.status_code == 400, body


async def test_bulk_status(client, owner_headers, make_job, db):
    mine = await make_job()
    victim = await make_job(user_id=OTHER_USER_ID)

    res = await client.put(
        "/api/jobs/bulk/status",
        json={"jobIds": [str(mine.id), str(victim.id)], "status": "Phone Screen"},
        headers=owner_headers,
    )
    assert res.status_code == 200
    assert [(j["id"], j["status"]) for j in res.json()["updated"]] == [(str(mine.id), "Phone Screen")]

    stored = (await db.execute(select(Job).where(Job.id == victim.id))).scalar_one()
    assert stored.status == "Interested"


async def test_upcoming_deadlines(client, owner_headers, make_job):
    today = datetime.now(timezone.utc).date()
    await make_job(title="Soon", deadline=today + timedelta(days=2))
    await make_job(title="Later", deadline=today + timedelta(days=30))
    await make_job(title="Past", deadline=today - timedelta(days=3))
    await make_job(title="Undated")

    res = await client.get("/api/jobs/deadlines/upcoming", headers=owner_headers)
    assert res.status_code == 200
    assert [(d["title"], d["urgency"]) for d in res.json()] == [
        ("Past", "overdue"),
        ("Soon", "urgent"),
        ("Later", "safe"),
    ]

    res = await client.get(
        "/api/jobs/deadlines/upcoming",
        params={"include_overdue": "false", "limit": 1},
        headers=owner_headers,
    )
    assert [d["title"] for d in res.json()] == ["Soon"]


async def test_end_to_end_pipeline(client, owner_headers):
    res = await client.post("/api/jobs", json={"title": "Eng", "company": "Acme"}, headers=owner_headers)
    assert res.status_code == 201
    job = res.json()
    assert job["status"] == "Interested"
    assert job["days_until_deadline"] is None
    created_stamp = _stamp(job["status_updated_at"])

    res = await client.put(f"/api/jobs/{job['id']}/status", json={"status": "Applied"}, headers=owner_headers)
    assert res.status_code == 200
    applied_stamp = _stamp(res.json()["status_updated_at"])
    assert applied_stamp > created_stamp

    # A missing deadline stays missing; the row still counts as touched
    res = await client.put(
        "/api/jobs/bulk/deadline",
        json={"jobIds": [job["id"]], "daysToAdd": 7},
        headers=owner_headers,
    )
    assert res.status_code == 200
    assert res.json()["updated"] == [{"id": job["id"], "title": "Eng", "deadline": None}]

    detail = (await client.get(f"/api/jobs/{job['id']}", headers=owner_headers)).json()
    assert detail["deadline"] is None
    assert detail["status"] == "Applied"
    assert _stamp(detail["status_updated_at"]) >= applied_stamp
