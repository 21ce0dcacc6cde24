"""Shared test fixtures for the knowledge base API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from app.core.database import Base, get_db
from app.main import app

# Import all models to ensure they're registered with Base.metadata
from app.models.business import Business
from app.models.user import User
from app.models.knowledge import KnowledgeBase  # noqa: F401
from app.services.auth import create_access_token


# Use aiosqlite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test, wired into the app's get_db."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db(session_factory):
    """Direct DB session for test setup/assertions."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def business(db):
    business = Business(name="Test Plumbing", owner_phone="+10000000000", is_active=True)
    db.add(business)
    await db.commit()
    await db.refresh(business)
    return business


@pytest_asyncio.fixture
async def auth_user(db, business):
    """User attached to `business`, plus ready-to-use auth headers."""
    user = User(email="owner@example.com", full_name="Owner", business_id=business.id, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)

    token = create_access_token({"sub": str(user.id)})
    return {
        "user_id": str(user.id),
        "business_id": str(business.id),
        "headers": {"Authorization": f"Bearer {token}"},
    }
