"""Core business logic for Openly."""

from .shortid import ShortIDGenerator
from .sessions import AuthResult, SessionService
from .service import LinkService

__all__ = ["ShortIDGenerator", "AuthResult", "SessionService", "LinkService"]
