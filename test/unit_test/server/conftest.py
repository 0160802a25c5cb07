from datetime import timedelta
from typing import AsyncGenerator, Callable, Dict
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from emotions_app.core.database import Base, create_sessionmaker
from emotions_app.core.database import entities  # noqa: F401
from emotions_app.core.database.repositories import RepositoryBundle, build_repositories
from emotions_app.core.models.domain.enums import UserRole
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.domain.rate_limit import AttemptRateLimiter
from emotions_app.server.core.config import DailyConfig
from emotions_app.server.core.constant import USER_ID_HEADER, USER_ROLE_HEADER
from emotions_app.server.services.meeting_rooms import MeetingRoomClient
from emotions_app.server.services.notifications import NotificationService

# Use in-memory SQLite for testing
# Note: StaticPool keeps the single in-memory database alive across connections
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database with every table for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async with create_sessionmaker(test_engine)() as session:
        yield session


@pytest.fixture
def repos(session: AsyncSession) -> RepositoryBundle:
    return build_repositories(session)


@pytest.fixture
def notifications(repos: RepositoryBundle) -> NotificationService:
    return NotificationService(repos.notifications)


@pytest.fixture
def rooms() -> MeetingRoomClient:
    """Meeting room client without an API key, so rooms use the fallback domain."""
    return MeetingRoomClient(DailyConfig(api_key=None, domain_url="https://mock.daily.co"))


@pytest.fixture
def patient() -> CurrentUser:
    return CurrentUser(id="patient_1", role=UserRole.patient)


@pytest.fixture
def other_patient() -> CurrentUser:
    return CurrentUser(id="patient_2", role=UserRole.patient)


@pytest.fixture
def mentor() -> CurrentUser:
    return CurrentUser(id="mentor_1", role=UserRole.mood_mentor)


@pytest.fixture
def other_mentor() -> CurrentUser:
    return CurrentUser(id="mentor_2", role=UserRole.mood_mentor)


@pytest.fixture
def admin() -> CurrentUser:
    return CurrentUser(id="admin_1", role=UserRole.admin)


@pytest.fixture
def headers_for() -> Callable[[CurrentUser], Dict[str, str]]:
    """Build the identity headers the auth gateway would set for a user."""

    def _headers(user: CurrentUser) -> Dict[str, str]:
        return {USER_ID_HEADER: user.id, USER_ROLE_HEADER: user.role.value}

    return _headers


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession, rooms: MeetingRoomClient) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from emotions_app.core.database.session import get_session
    from emotions_app.server.main import app
    from emotions_app.server.services.deps import get_meeting_room_client, get_rate_limiter

    limiter = AttemptRateLimiter(max_attempts=5, window=timedelta(minutes=30))

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_meeting_room_client] = lambda: rooms
    app.dependency_overrides[get_rate_limiter] = lambda: limiter

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("emotions_app.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seed_profiles(repos: RepositoryBundle) -> RepositoryBundle:
    """Register two patients and two mood mentors."""
    from emotions_app.core.database.entities import MoodMentorProfile, PatientProfile

    await repos.patients.create_many(
        [
            PatientProfile(user_id="patient_1", full_name="Amina Njeri", email="amina@example.com", gender="female"),
            PatientProfile(user_id="patient_2", full_name="Brian Otieno", email="brian@example.com", gender="male"),
        ]
    )
    await repos.mentors.create_many(
        [
            MoodMentorProfile(
                user_id="mentor_1", full_name="Dr. Grace Wanjiru", email="grace@example.com", specialty="Anxiety"
            ),
            MoodMentorProfile(user_id="mentor_2", full_name="Dr. Henry Kamau", email="henry@example.com"),
        ]
    )
    return repos
