"""
Pytest fixtures for test database, client, users per role and events.

Each test gets a fresh schema. The default database is in-memory SQLite;
set TEST_DATABASE_URL to run against PostgreSQL instead.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, time, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from nightline.main import app
from nightline.db.base import Base
from nightline.db.session import get_db
from nightline.core.security import create_user_token, hash_password
from nightline.models.user import User
from nightline.models.event import Event
from nightline.services import cache_service

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

DEFAULT_PASSWORD = "testpassword123"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def cache_invalidations(db_session: AsyncSession, monkeypatch):
    """
    Replace the Redis invalidation with a recorder. Each call appends whether
    the request session still had an open transaction at that moment.
    """
    calls = []

    async def record():
        calls.append(db_session.in_transaction())

    monkeypatch.setattr(cache_service, "invalidate_event_cache", record)
    return calls


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    """Factory for users with a given role."""

    async def _make(username: str, role: str = "user", **fields) -> User:
        user = User(
            username=username,
            hashed_password=hash_password(fields.pop("password", DEFAULT_PASSWORD)),
            role=role,
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def test_user(make_user) -> User:
    return await make_user("testuser", email="test@example.com", phone="555-0100")


@pytest_asyncio.fixture
async def promoter(make_user) -> User:
    return await make_user("promoter", role="promoter")


@pytest_asyncio.fixture
async def other_promoter(make_user) -> User:
    return await make_user("otherpromoter", role="promoter")


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user("admin", role="admin")


@pytest_asyncio.fixture
async def owner(make_user) -> User:
    return await make_user("owner", role="owner")


def auth_headers(user: User) -> dict:
    """Authorization headers with a Bearer token for `user`."""
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest_asyncio.fixture
async def make_event(db_session: AsyncSession):
    """Factory for events stored directly, bypassing the lifecycle rules."""

    async def _make(organizer: User, **fields) -> Event:
        values = {
            "name": "Warehouse Night",
            "description": "Late set",
            "date": date.today() + timedelta(days=30),
            "start_time": time(21, 0),
            "end_time": time(23, 59),
            "venue_name": "The Warehouse",
            "venue_address": "1 Dock St",
            "city": "Oakland",
            "organizer_user_id": organizer.id,
            "ticket_button_label": "Purchase tickets",
            "status": "draft",
            "is_published": False,
            "is_featured": False,
        }
        values.update(fields)
        event = Event(**values)
        db_session.add(event)
        await db_session.commit()
        await db_session.refresh(event)
        return event

    return _make


def event_payload(**overrides) -> dict:
    payload = {
        "name": "Rooftop Sessions",
        "description": "Sunset DJ sets",
        "date": (date.today() + timedelta(days=14)).isoformat(),
        "start_time": "20:00:00",
        "end_time": "23:30:00",
        "venue_name": "Skyline Roof",
        "venue_address": "200 Market St",
        "city": "San Francisco",
        "ticket_url": "https://tickets.example.com/rooftop",
    }
    payload.update(overrides)
    return payload
