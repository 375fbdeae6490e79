"""
Test configuration and fixtures for HydroBuddy.

Implements the transaction rollback pattern:
- Session-scoped engine (in-memory SQLite unless TEST_DATABASE_URL is set)
- Function-scoped transactional session with automatic rollback
- TestClient with database dependency override
- Authenticated client fixtures
"""

import os

# Keep the app's own engine off the production database during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import Callable, Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models import User, Session as UserSession
from app.services.file_service import file_service
from tests.factories import create_session, create_user


# =============================================================================
# Database Fixtures
# =============================================================================


def get_test_database_url() -> str:
    """
    Get the test database URL.

    Priority:
    1. TEST_DATABASE_URL environment variable
    2. In-memory SQLite shared across threads

    Each test runs in a transaction that is rolled back after the test,
    so no test data persists and tests are fully isolated.
    """
    return os.environ.get("TEST_DATABASE_URL", "sqlite://")


@pytest.fixture(scope="session")
def test_engine():
    """
    Create test database engine once per session.

    Tables are created at the start and dropped at the end.
    """
    database_url = get_test_database_url()

    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url)

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(test_engine) -> Generator[Session, None, None]:
    """
    Provide a transactional database session that rolls back after each test.

    Service-level commits stay inside the outer transaction, so tests can
    exercise commit paths without persisting anything.
    """
    connection = test_engine.connect()
    transaction = connection.begin()

    TestingSessionLocal = sessionmaker(bind=connection)
    session = TestingSessionLocal()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Store photos and avatars under a per-test temporary directory."""
    monkeypatch.setattr(file_service, "upload_dir", tmp_path)
    return tmp_path


# =============================================================================
# TestClient Fixtures
# =============================================================================


def _override_db(db: Session):
    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - managed by db fixture

    return override_get_db


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    Unauthenticated TestClient with database dependency override.
    """
    app.dependency_overrides[get_db] = _override_db(db)

    with TestClient(app) as test_client:
        # Set default Referer so CSRF Origin middleware allows requests
        test_client.headers["referer"] = "http://testserver/"
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a test user."""
    return create_user(db, email="testuser@example.com", name="Test User")


@pytest.fixture
def test_session(db: Session, test_user: User) -> UserSession:
    """Create a test session for the test user."""
    return create_session(db, test_user)


@pytest.fixture
def auth_client(
    db: Session, test_session: UserSession
) -> Generator[TestClient, None, None]:
    """
    Authenticated TestClient for the test user.

    Creates a separate TestClient instance to avoid cookie conflicts.
    """
    app.dependency_overrides[get_db] = _override_db(db)

    with TestClient(app) as test_client:
        test_client.cookies.set(settings.session_cookie_name, test_session.token)
        test_client.headers["referer"] = "http://testserver/"
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def client_for(db: Session) -> Generator[Callable[[User], TestClient], None, None]:
    """
    Factory for authenticated TestClients, one per user.

    Used by multi-user flows (friend requests, leaderboards).
    """
    app.dependency_overrides[get_db] = _override_db(db)
    opened: List[TestClient] = []

    def make(user: User) -> TestClient:
        session = create_session(db, user)
        test_client = TestClient(app)
        test_client.cookies.set(settings.session_cookie_name, session.token)
        test_client.headers["referer"] = "http://testserver/"
        opened.append(test_client)
        return test_client

    yield make

    for test_client in opened:
        test_client.close()
    app.dependency_overrides.clear()


# =============================================================================
# pytest markers
# =============================================================================


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
