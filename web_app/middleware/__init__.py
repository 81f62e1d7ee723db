"""Middleware for the Openly web app."""

from .auth import SessionAuthMiddleware
from .logging import LoggingMiddleware

__all__ = ["SessionAuthMiddleware", "LoggingMiddleware"]
