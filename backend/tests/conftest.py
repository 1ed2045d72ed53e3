"""
Employee Directory Backend - Test Configuration (conftest.py)
===============================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Reusable test infrastructure: a real in-memory SQLite database, a
       mocked session for pure unit tests, and an API client.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh per test):
    ├── database: in-memory Database with the schema created
    │   ├── db_session: AsyncSession on that database
    │   │   └── repository: EmployeeRepository on that session
    │   └── test_client: HTTPX AsyncClient for an app built around `database`
    ├── mock_db_session: Mock database session (no real DB needed)
    └── sample_employee_data: attribute bag shaped like an Employee row
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["DB_ECHO"] = "false"

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from employee_directory.database import Database
from employee_directory.repositories.employee_repository import EmployeeRepository

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def database():
    """
    A throwaway in-memory database with the employees table created.

    StaticPool keeps a single connection, so every session opened on this
    handle sees the same data.
    """
    db = Database(MEMORY_URL)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def repository(db_session):
    return EmployeeRepository(db_session)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    A MagicMock that simulates AsyncSession behavior.
    Why:     Service tests patch the repository and never touch SQL.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_employee_data():
    """Field values of a stored employee, as the repository would return them."""
    return {
        "id": 1,
        "name": "John Doe",
        "email": "john@example.com",
        "position": "Developer",
        "phone": "+1 (555) 123-4567",
        "created_at": datetime(2024, 1, 15, 12, 0, 0),
        "updated_at": datetime(2024, 1, 15, 12, 0, 0),
    }


@pytest.fixture
def sample_employee(sample_employee_data):
    return SimpleNamespace(**sample_employee_data)


@pytest_asyncio.fixture
async def test_client(database):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to an app built around
             the in-memory `database` fixture.
    How:     ASGITransport routes requests directly to the app. The lifespan
             does not run under ASGITransport, so the schema comes from the
             `database` fixture instead.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from employee_directory.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
