"""Shared test fixtures for HabitKeeper tests.

Provides:
- Async FastAPI test client with a mocked database session
- In-memory SQLite engine, sessions and factories for store/service tests
- Auth helpers (token generation for authenticated requests)
- Common test data factories
"""
import os

# Settings are read when habitkeeper is first imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from habitkeeper.models import Base, Habit, HabitCompletion, User


# --- Mocked HTTP client ---

@pytest.fixture
def mock_db():
    """Mock async database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
async def client(mock_db):
    """Async HTTP test client for the FastAPI app.

    Uses httpx AsyncClient with ASGI transport, so no server is started and
    the lifespan hook does not run. The database dependency is a mock.
    """
    from habitkeeper.core.database import get_db
    from habitkeeper.main import app

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        ac._mock_db = mock_db  # expose for test access
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_token():
    """Generate a valid JWT token for authenticated test requests."""
    from habitkeeper.services.auth import create_access_token
    return create_access_token(user_id=1)


@pytest.fixture
def auth_headers(auth_token):
    """Authorization headers with a valid bearer token."""
    return {"Authorization": f"Bearer {auth_token}"}


# --- Real database (in-memory SQLite) ---

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def user(db):
    """A persisted, active user."""
    user = User(
        email="habits@example.com",
        hashed_password="$2b$12$fakehash",
        full_name="Habit Tester",
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
def habit_factory(db, user):
    """Persist a habit (and optional completions) for ``user``.

    ``completions`` is a list of ``(day, completed, progress)`` tuples.
    """
    async def create(completions=(), **overrides):
        fields = {
            "user_id": user.id,
            "name": "Read",
            "icon": "📖",
            "type": "Good",
            "goal": 1,
            "active_days": [1, 2, 3, 4, 5],
            "start_date": date(2024, 1, 1),
        }
        fields.update(overrides)
        habit = Habit(**fields)
        db.add(habit)
        await db.flush()
        for day, completed, progress in completions:
            db.add(HabitCompletion(habit_id=habit.id, day=day, completed=completed, progress=progress))
        await db.commit()
        return habit

    return create


@pytest.fixture
async def api_client(session_maker, user):
    """HTTP client backed by the in-memory database, authenticated as ``user``.

    Background achievement checks use the same database.
    """
    from unittest.mock import patch

    from habitkeeper.core.database import get_db
    from habitkeeper.main import app
    from habitkeeper.services.auth import create_access_token

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    with patch("habitkeeper.services.achievements.async_session_maker", session_maker):
        async with AsyncClient(
            transport=transport,
            base_url="http://test",
            headers={"Authorization": f"Bearer {create_access_token(user.id)}"},
        ) as ac:
            yield ac

    app.dependency_overrides.clear()


# --- Test data factories ---

def make_user(**overrides):
    """Create a mock User object with sensible defaults."""
    user = MagicMock()
    defaults = {
        "id": 1,
        "email": "test@example.com",
        "full_name": "Test User",
        "hashed_password": "$2b$12$fakehash",
        "is_active": True,
    }
    defaults.update(overrides)
    for key, value in defaults.items():
        setattr(user, key, value)
    return user


def make_habit(completions=(), **overrides):
    """Plain habit object for the pure statistics and rule functions.

    ``completions`` is a list of ``(day, completed, progress)`` tuples.
    """
    fields = {
        "id": 1,
        "name": "Read",
        "type": "Good",
        "goal": 1,
        "active_days": [1, 2, 3, 4, 5],
        "start_date": date(2024, 1, 1),
    }
    fields.update(overrides)
    fields["completions"] = [
        SimpleNamespace(day=day, completed=completed, progress=progress)
        for day, completed, progress in completions
    ]
    return SimpleNamespace(**fields)
