"""FastAPI application factory."""

import os

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from openly.common.logging_config import get_logger
from openly.errors import OpenlyError
from .api import api_router
from .web import web_router
from .middleware.auth import SessionAuthMiddleware
from .middleware.logging import LoggingMiddleware
from .views import render, render_internal_error, render_not_found

logger = get_logger("web")

APP_VERSION = "1.0.0"


async def _http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return render_not_found(request)
    if exc.status_code >= 500:
        return render_internal_error(request)
    return render(request, "404.html", status_code=exc.status_code)


async def _openly_error(request: Request, exc: OpenlyError):
    logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return render_internal_error(request)


async def _unhandled_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return render_internal_error(request)


def create_app(
    db_instance,
    cache_instance,
    session_service,
    link_service,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        db_instance: Database instance
        cache_instance: Cache instance (or None)
        session_service: Session service instance
        link_service: Link service instance
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Openly",
        description="Minimal URL shortener with a single admin",
        version=APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Store instances in app state for access in routes
    app.state.db = db_instance
    app.state.cache = cache_instance
    app.state.sessions = session_service
    app.state.service = link_service
    app.state.config = config

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(OpenlyError, _openly_error)
    app.add_exception_handler(Exception, _unhandled_error)

    # Outermost last: logging wraps the session lookup
    app.add_middleware(SessionAuthMiddleware)
    app.add_middleware(LoggingMiddleware)

    static_path = os.path.join(os.path.dirname(__file__), "..", "ux", "static")
    if os.path.exists(static_path):
        app.mount("/static", StaticFiles(directory=static_path), name="static")

    # JSON routes first so /health is not taken for a short ID
    app.include_router(api_router, tags=["API"])
    app.include_router(web_router, tags=["Web"])

    return app
