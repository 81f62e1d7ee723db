"""JSON routes: link creation and health."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import JSONResponse

from openly.common.logging_config import get_logger
from openly.errors import LinkCreationError, NotAuthenticatedError
from openly.sessions import AuthResult
from ..views import current_auth
from .schemas import ShortenResponse, ErrorResponse, HealthResponse

router = APIRouter()
logger = get_logger("web.api")


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    summary="Create short link",
    description="Create a short link for long_url. Requires an admin session cookie; failures come back as {\"error\": ...}.",
)
async def shorten(
    request: Request,
    long_url: str = Form(""),
    auth: AuthResult = Depends(current_auth),
):
    """Create a short link and return its ID as JSON."""
    service = request.app.state.service

    try:
        short_id = await service.create(long_url, auth)
    except NotAuthenticatedError:
        logger.info("Admin login required for /shorten")
        return JSONResponse(ErrorResponse(error="Admin login required").model_dump())
    except LinkCreationError:
        return JSONResponse(ErrorResponse(error="Internal Server Error").model_dump())

    return ShortenResponse(short_id=short_id)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service and its store are healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return JSONResponse(
        HealthResponse(
            status="healthy" if health["overall"] else "unhealthy",
            database="healthy" if health["database"] else "unhealthy",
            cache="healthy" if health["cache"] else "unhealthy",
            timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json"),
        status_code=status.HTTP_200_OK if health["overall"] else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
