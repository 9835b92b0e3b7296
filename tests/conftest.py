"""
Pytest configuration: throwaway SQLite database per test and an ASGI client.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "pipeline-ats-test-secret-0123456789abcdef")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ats.auth import create_access_token
from ats.database import get_db
from ats.models import Base, Job
from ats.models.base import utcnow
from main import app

OWNER_ID = 1
OTHER_USER_ID = 2


def auth_header(user_id: int = OWNER_ID) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Create a fresh database file with all tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    """Session for arranging and inspecting rows directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """API client whose requests use the test database."""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def owner_headers():
    return auth_header(OWNER_ID)


@pytest.fixture
def other_headers():
    return auth_header(OTHER_USER_ID)


@pytest.fixture
def make_job(session_factory):
    """Insert a job row directly, bypassing the API."""
    async def _make_job(user_id: int = OWNER_ID, **fields) -> Job:
        now = utcnow()
        values = {
            "title": "Backend Engineer",
            "company": "Acme",
            "status": "Interested",
            "status_updated_at": now,
            "created_at": now,
        }
        values.update(fields)
        async with session_factory() as session:
            job = Job(user_id=user_id, **values)
            session.add(job)
            await session.commit()
            await session.refresh(job)
            return job

    return _make_job
