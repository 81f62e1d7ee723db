"""Admin session issuing, lookup and revocation."""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .database.base import OpenlyDBBase
from .errors import StorageError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of resolving a session cookie for one request."""

    authenticated: bool = False

    @classmethod
    def anonymous(cls) -> "AuthResult":
        return cls(authenticated=False)

    @classmethod
    def admin(cls) -> "AuthResult":
        return cls(authenticated=True)


@dataclass(frozen=True)
class IssuedSession:
    """A freshly issued session token and its expiry."""

    token: str
    expires_at: datetime


class SessionService:
    """Single shared admin identity guarded by one password."""

    def __init__(
        self,
        db: OpenlyDBBase,
        admin_password: str = "admin",
        ttl: timedelta = timedelta(hours=24),
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize session service.

        Args:
            db: Database instance
            admin_password: Plaintext password that opens a session
            ttl: Session lifetime
            logger: Optional logger
            clock: Source of the current UTC time
        """
        self.db = db
        self.admin_password = admin_password
        self.ttl = ttl
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    async def authenticate(self, password: Optional[str]) -> Optional[IssuedSession]:
        """Open a session if password matches.

        Returns:
            The issued session, or None when the password is wrong. A wrong
            password writes nothing.

        Raises:
            StorageError: If the session row cannot be stored
        """
        if not password or not secrets.compare_digest(
            password.encode("utf-8"), self.admin_password.encode("utf-8")
        ):
            self.logger.info("Admin login failed")
            return None

        now = self.clock()
        session = IssuedSession(token=str(uuid.uuid4()), expires_at=now + self.ttl)
        await self.db.create_session(session.token, session.expires_at, created_at=now)
        self.logger.info("Admin login successful")

        try:
            await self.purge_expired()
        except StorageError as e:
            self.logger.warning(f"Expired session sweep failed: {e}")

        return session

    async def resolve(self, token: Optional[str]) -> AuthResult:
        """Map a session cookie value to an authentication result.

        Missing, unknown and expired tokens are anonymous, and so is any
        storage failure during the lookup.
        """
        if not token:
            return AuthResult.anonymous()

        try:
            active = await self.db.session_is_active(token, self.clock())
        except StorageError as e:
            self.logger.error(f"Session lookup failed: {e}")
            return AuthResult.anonymous()

        return AuthResult.admin() if active else AuthResult.anonymous()

    async def revoke(self, token: Optional[str]) -> bool:
        """Delete the session row for token, if any.

        Returns:
            True if a row was deleted
        """
        if not token:
            return False

        try:
            deleted = await self.db.delete_session(token)
        except StorageError as e:
            self.logger.error(f"Session revocation failed: {e}")
            return False

        self.logger.info("Admin logged out" if deleted else "Logout for unknown session")
        return deleted

    async def purge_expired(self) -> int:
        """Delete expired session rows.

        Returns:
            Number of rows deleted
        """
        purged = await self.db.delete_expired_sessions(self.clock())
        if purged:
            self.logger.info(f"Purged {purged} expired session(s)")
        return purged
