from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from buddy.core.database import get_db
from buddy.core.database.base import Base
from buddy.main import app
from buddy.modules.members.models import Member, MemberStatus

# In-memory SQLite shared by every connection of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh database with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Get test database session."""
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Get test HTTP client with overridden database dependency."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def members(db_session: AsyncSession) -> dict[str, Member]:
    """A small member directory: three active members and one graduate."""
    rows = [
        Member(id="20240001", name="Kim Minji", department="Computer Science"),
        Member(id="20240002", name="Lee Jihoon", department="Software"),
        Member(id="20240003", name="Park Seoyeon", department="Mathematics"),
        Member(
            id="20190007",
            name="Choi Hyunwoo",
            department="Computer Science",
            status=MemberStatus.GRADUATED.value,
        ),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return {m.id: m for m in rows}
