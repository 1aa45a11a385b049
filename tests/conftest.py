"""
Pytest configuration and fixtures for testing.
"""
import os
import tempfile

# Test database URL - use environment variable if available (for Docker)
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "eventhub_test.db"),
)

# Settings are read at import time, so configure them before importing the app
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["PROMOTION_SWEEP_ENABLED"] = "false"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable, List
from datetime import datetime, timedelta
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.db.session import Base, get_session
from app.db.models import User, Event, RSVP, RSVPStatusEnum
from app.core.errors import DispatchFailure
from app.services.locks import EventLockRegistry
from app.services.notifications import NotificationDispatcher, NotificationKind
from app.services.rsvp_service import RSVPService


test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,  # Disable connection pooling for tests
    echo=False,
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class RecordingDispatcher(NotificationDispatcher):
    """Collects notifications instead of publishing them; can fail for chosen users."""

    def __init__(self):
        self.sent: List[tuple] = []
        self.fail_for = set()

    async def notify(self, user_id, event_id, kind: NotificationKind, payload: dict) -> None:
        if user_id in self.fail_for:
            raise DispatchFailure(user_id, kind.value, RuntimeError("broker unavailable"))
        self.sent.append((user_id, event_id, kind, payload))

    def recipients(self, kind: NotificationKind) -> list:
        return [user_id for user_id, _, k, _ in self.sent if k is kind]


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.
    Tables are recreated around every test for complete isolation.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory(db_session) -> Callable[[], AsyncSession]:
    """Factory for independent sessions against the same test database."""
    return TestSessionLocal


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing API endpoints.
    Every request gets its own session on the test database.
    """
    async def override_get_session():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def rsvp_service(db_session: AsyncSession, dispatcher: RecordingDispatcher) -> RSVPService:
    return RSVPService(db_session, dispatcher=dispatcher, locks=EventLockRegistry())


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    """Create users on demand: `await make_user("u1")`."""
    async def _make(name: str) -> User:
        user = User(email=f"{name}@example.com", full_name=name.upper())
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make


@pytest_asyncio.fixture
async def test_organizer(make_user) -> User:
    return await make_user("organizer")


@pytest_asyncio.fixture
async def make_event(db_session: AsyncSession, test_organizer: User):
    """Create events on demand with a given capacity."""
    async def _make(max_attendees: int, title: str = "Test Event") -> Event:
        event = Event(
            title=title,
            description="A test event description",
            location="Test Location",
            starts_at=datetime.utcnow() + timedelta(days=7),
            max_attendees=max_attendees,
            created_by=test_organizer.id,
        )
        db_session.add(event)
        await db_session.commit()
        await db_session.refresh(event)
        return event
    return _make


@pytest_asyncio.fixture
async def attend(db_session: AsyncSession):
    """Insert an attending RSVP directly, bypassing admission."""
    async def _attend(user: User, event: Event) -> RSVP:
        rsvp = RSVP(user_id=user.id, event_id=event.id, status=RSVPStatusEnum.attending, guest_count=1)
        db_session.add(rsvp)
        await db_session.commit()
        return rsvp
    return _attend
