"""
Test fixtures - in-memory SQLite database, frozen clock + authenticated HTTP clients
"""
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from sarthi.database import Base, get_db
from sarthi.main import app
from sarthi.api.auth import get_password_hash, create_access_token
from sarthi.api.meetings import get_clock
from sarthi.models.user import User

# Tuesday noon, reference timezone is UTC in tests
FROZEN_NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture()
def clock():
    return FrozenClock(FROZEN_NOW)


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """Insert baseline test data: a session expert and an attendee"""
    expert = User(
        email="expert@sarthi.in",
        full_name="Expert User",
        hashed_password=get_password_hash("testpass123"),
        is_active=True,
    )
    attendee = User(
        email="asha@example.com",
        full_name="Asha Patel",
        hashed_password=get_password_hash("testpass123"),
        is_active=True,
    )

    db_session.add_all([expert, attendee])
    await db_session.commit()
    await db_session.refresh(expert)
    await db_session.refresh(attendee)

    return {"expert": expert, "attendee": attendee}


def auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for():
    """Bearer headers for any seeded user"""
    return auth_headers


@pytest_asyncio.fixture()
async def client(db_session, seed_data, clock):
    """httpx AsyncClient authenticated as the expert, with the clock frozen"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        ac.headers.update(auth_headers(seed_data["expert"]))
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauth_client(db_session, clock):
    """Unauthenticated httpx AsyncClient"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()
