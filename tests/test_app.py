"""Tests for application startup and shutdown."""

import pytest

from app import lifespan
from config import Config
from openly.database.sqlite import OpenlySQLiteDB
from openly.errors import StorageError
from openly.service import LinkService
from web_app import create_app


def build_app(database_path, logger):
    config = Config(_env_file=None, database_path=database_path, redis_url=None)
    app = create_app(
        db_instance=None,
        cache_instance=None,
        session_service=None,
        link_service=None,
        config=config,
    )
    app.state.logger = logger
    return app


class TestLifespan:
    """Store and services opened by the lifespan."""

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self, tmp_path, logger):
        app = build_app(str(tmp_path / "openly.db"), logger)

        async with lifespan(app):
            assert isinstance(app.state.service, LinkService)
            assert app.state.cache is None
            assert await app.state.db.health_check()

        assert not await app.state.db.health_check()

    @pytest.mark.asyncio
    async def test_unopenable_database_aborts_startup(self, tmp_path, logger):
        """A directory cannot be opened as the store; startup fails."""
        app = build_app(str(tmp_path), logger)

        with pytest.raises(StorageError):
            async with lifespan(app):
                pytest.fail("lifespan must not yield")

        assert app.state.service is None

    @pytest.mark.asyncio
    async def test_session_sweep_failure_is_not_fatal(self, tmp_path, logger, monkeypatch):
        async def broken_sweep(self, now):
            raise StorageError("database is locked")

        monkeypatch.setattr(OpenlySQLiteDB, "delete_expired_sessions", broken_sweep)
        app = build_app(str(tmp_path / "openly.db"), logger)

        async with lifespan(app):
            assert await app.state.service.health_check() == {
                "database": True,
                "cache": True,
                "overall": True,
            }
