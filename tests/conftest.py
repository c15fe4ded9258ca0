"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, recreated for every test
- User factory and bearer headers for authenticated calls
- HTTPX AsyncClient bound to the app
"""
import os
from typing import AsyncGenerator

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sams.main import app
from sams.database import Base, get_db
from sams.core.security import create_access_token
from sams.constants.roles import get_role_category
from sams.models.user import User
from sams.utils.password import hash_password

PASSWORD = "appraise-me-123"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db: AsyncSession):
    """Factory: await make_user("TEACHERS", "teacher@school.com")"""
    async def _make(role: str, email: str, full_name: str = None, additional_roles=None) -> User:
        user = User(
            email=email,
            full_name=full_name or email.split("@")[0].title(),
            hashed_password=hash_password(PASSWORD),
            role=role,
            job_category=get_role_category(role).value,
            additional_roles=list(additional_roles or []),
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user
    return _make


@pytest.fixture
async def director(make_user) -> User:
    return await make_user("DIRECTOR", "director@school.com", "Dana Director")


@pytest.fixture
async def section_head(make_user) -> User:
    return await make_user("SECTION HEAD UPPER PRIMARY", "upper.head@school.com", "Sam Section")


@pytest.fixture
async def teacher(make_user) -> User:
    return await make_user("TEACHERS", "teacher@school.com", "Tess Teacher")


# =============================================================================
# Auth / Client Fixtures
# =============================================================================

def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return auth_headers


# =============================================================================
# Appraisal documents
# =============================================================================

def _signed(name_a="Tess", name_b="Sam"):
    return {
        "appraiseeSignature": name_a,
        "appraiseeDate": "2026-02-01",
        "appraiserSignature": name_b,
        "appraiserDate": "2026-02-01",
    }


def build_teaching_document(term="Term 1", year="2026", complete=True) -> dict:
    """A teacher's scoresheet; complete=True fills every gate up to COMPLETED."""
    doc = {
        "term": term,
        "year": year,
        "targets": [{"id": 1, "area": "Numeracy", "description": "Mean score", "target": 100, "actual": ""}],
        "observation1": {},
        "observation2": {},
        "evaluation": {},
    }
    if complete:
        doc["targets"][0]["actual"] = 99
        doc["targetSignatures"] = _signed()
        doc["targetReviewSignatures"] = _signed()
        doc["completionSignatures"] = _signed()
        doc["observation1"] = {
            "ratings": {str(i): 4 for i in range(9)},
            "date": "2026-02-10",
            "time": "09:00",
            "subject": "Mathematics",
        }
        doc["evaluation"] = {"ratings": {str(i): 4 for i in range(6)}}
    return doc


@pytest.fixture
def teaching_document():
    return build_teaching_document
