#!/usr/bin/env python3
"""
Main entry point for the Openly URL shortener.

Concurrency: requests are served concurrently on one event loop
(FastAPI + uvicorn). The SQLite store is a single connection driven from one
database thread; writes are serialized by the store's write lock.

Usage:
    python app.py

Environment variables (a .env file is also read):
    PORT - Port to listen on (default 3000)
    HOST - Address to bind (default 127.0.0.1)
    ADMIN_PASSWORD - Shared admin password (default "admin")
    DATABASE_PATH - SQLite database file (default openly.db)
    REDIS_URL - Redis connection URL (optional)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI
from uvicorn.main import STARTUP_FAILURE

from config import load_config
from openly.database import OpenlySQLiteDB, RedisCache
from openly.errors import StorageError
from openly.service import LinkService
from openly.sessions import SessionService
from openly.shortid import ShortIDGenerator
from openly.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store and services on startup, close them on shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting Openly...")

    db = OpenlySQLiteDB(db_config=config.database_path, logger=logger.getChild("db"))
    try:
        await db.open()
    except StorageError as e:
        logger.critical(f"Cannot open database, aborting: {e}")
        await db.close()
        raise

    cache = None
    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger.getChild("cache"),
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    sessions = SessionService(
        db=db,
        admin_password=config.admin_password,
        ttl=timedelta(hours=config.session_ttl_hours),
        logger=logger.getChild("sessions"),
    )
    service = LinkService(
        db=db,
        cache=cache,
        short_id_generator=ShortIDGenerator(default_length=config.short_id_length),
        logger=logger.getChild("links"),
        max_collision_retries=config.max_collision_retries,
    )

    app.state.db = db
    app.state.cache = cache
    app.state.sessions = sessions
    app.state.service = service

    try:
        await sessions.purge_expired()
    except StorageError as e:
        logger.warning(f"Expired session sweep failed: {e}")
    logger.info("Service started successfully")

    yield

    logger.info("Shutting down Openly...")
    await service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info(f"Configuration: {config.safe_dump()}")

    # Services are created in lifespan
    app = create_app(
        db_instance=None,
        cache_instance=None,
        session_service=None,
        link_service=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )
    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(f"Listening on {config.host}:{config.port}")
    server.run()

    if not server.started:
        logger.critical("Server failed to start")
        sys.exit(STARTUP_FAILURE)


if __name__ == "__main__":
    main()
