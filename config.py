"""Configuration management for Openly."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Database settings
    database_path: str = Field(
        default="openly.db",
        description="SQLite database file"
    )

    # Redis settings (optional)
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for caching short link lookups"
    )

    # Server settings
    host: str = Field(
        default="127.0.0.1",
        description="Host to bind to"
    )

    port: int = Field(
        default=3000,
        description="Port to listen on"
    )

    # Admin settings
    admin_password: str = Field(
        default="admin",
        description="Shared password for the admin session"
    )

    session_ttl_hours: int = Field(
        default=24,
        ge=1,
        description="Lifetime of an admin session in hours"
    )

    # Short link settings
    short_id_length: int = Field(
        default=6,
        ge=1,
        description="Length of generated short IDs"
    )

    max_collision_retries: int = Field(
        default=3,
        ge=0,
        description="Retries with a fresh short ID when an insert collides (0 = fail on first collision)"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    # Cache settings
    cache_ttl_seconds: int = Field(
        default=3600,
        description="Cache TTL in seconds"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    def safe_dump(self) -> dict:
        """Configuration suitable for logging (password masked)."""
        data = self.model_dump()
        data["admin_password"] = "***"
        return data


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
