"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

from httpx import ASGITransport, AsyncClient

from config import Config
from openly.database.sqlite import OpenlySQLiteDB
from openly.service import LinkService
from openly.sessions import AuthResult, SessionService
from openly.shortid import ShortIDGenerator
from openly.common.logging_config import setup_logging
from web_app import create_app

ADMIN_PASSWORD = "s3cret"


class FakeClock:
    """Controllable UTC clock starting at the real current time."""

    def __init__(self):
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def test_db(tmp_path, logger) -> AsyncGenerator[OpenlySQLiteDB, None]:
    """Open a fresh SQLite database file per test."""
    db = OpenlySQLiteDB(db_config=str(tmp_path / "openly.db"), logger=logger)
    await db.open()

    yield db

    await db.close()


@pytest.fixture
def short_id_generator():
    """Create short ID generator."""
    return ShortIDGenerator(default_length=6)


@pytest.fixture
def session_service(test_db, clock, logger) -> SessionService:
    return SessionService(
        db=test_db,
        admin_password=ADMIN_PASSWORD,
        ttl=timedelta(hours=24),
        logger=logger,
        clock=clock,
    )


@pytest.fixture
def service(test_db, short_id_generator, logger) -> LinkService:
    """Create link service instance."""
    return LinkService(
        db=test_db,
        cache=None,  # No cache for tests
        short_id_generator=short_id_generator,
        logger=logger,
    )


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD


@pytest.fixture
def admin():
    return AuthResult.admin()


@pytest.fixture
def anonymous():
    return AuthResult.anonymous()


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456?tab=votes#answers",
    ]


@pytest.fixture
def app(test_db, session_service, service, tmp_path):
    """Create test FastAPI app."""
    config = Config(
        database_path=str(tmp_path / "openly.db"),
        admin_password=ADMIN_PASSWORD,
    )

    return create_app(
        db_instance=test_db,
        cache_instance=None,
        session_service=session_service,
        link_service=service,
        config=config,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
async def admin_client(client):
    """Test client holding a valid admin session cookie."""
    response = await client.post("/loginadmin", data={"password": ADMIN_PASSWORD})
    assert response.status_code == 303
    assert "session_id" in client.cookies
    return client
