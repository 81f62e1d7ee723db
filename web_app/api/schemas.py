"""Pydantic schemas for JSON responses."""

from datetime import datetime

from pydantic import BaseModel, Field


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    short_id: str = Field(..., description="The generated short ID")

    model_config = {
        "json_schema_extra": {
            "examples": [{"short_id": "a1b2c3"}]
        }
    }


class ErrorResponse(BaseModel):
    """Error response. Never carries root-cause detail."""

    error: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")
