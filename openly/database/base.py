"""Abstract base class for Openly storage implementations."""

from abc import ABC, abstractmethod
from typing import Optional, List
from datetime import datetime

from .models import Link


class OpenlyDBBase(ABC):
    """Abstract base class for link and session storage."""

    def __init__(self, db_config: str):
        """Initialize database connection.

        Args:
            db_config: Database location (file path or connection string)
        """
        self.db_config = db_config

    @abstractmethod
    async def open(self) -> None:
        """Open the store and create tables if they don't exist.

        Raises:
            StorageError: If the store cannot be opened
        """
        pass

    @abstractmethod
    async def create_link(
        self,
        short_id: str,
        long_url: str,
        created_at: Optional[datetime] = None,
    ) -> Link:
        """Insert a new link.

        Args:
            short_id: The short ID to use
            long_url: The target URL
            created_at: Optional creation timestamp (defaults to now)

        Returns:
            The stored link

        Raises:
            DuplicateShortIDError: If short_id already exists
            StorageError: On any other failure
        """
        pass

    @abstractmethod
    async def get_link(self, short_id: str) -> Optional[Link]:
        """Get the link for an exact short ID, or None."""
        pass

    @abstractmethod
    async def list_links(self) -> List[Link]:
        """List all links in storage order."""
        pass

    @abstractmethod
    async def delete_link(self, link_id: int) -> Optional[str]:
        """Delete a link by numeric id.

        Returns:
            The deleted link's short ID, or None if nothing matched
        """
        pass

    @abstractmethod
    async def create_session(
        self,
        session_id: str,
        expiry_time: datetime,
        created_at: Optional[datetime] = None,
    ) -> None:
        """Store a session token with its expiry."""
        pass

    @abstractmethod
    async def session_is_active(self, session_id: str, now: datetime) -> bool:
        """True if session_id exists and expires strictly after now."""
        pass

    @abstractmethod
    async def delete_session(self, session_id: str) -> bool:
        """Delete a session token.

        Returns:
            True if a row was deleted
        """
        pass

    @abstractmethod
    async def delete_expired_sessions(self, now: datetime) -> int:
        """Delete sessions whose expiry is not after now.

        Returns:
            Number of rows deleted
        """
        pass

    @abstractmethod
    async def count_sessions(self) -> int:
        """Number of stored session rows, expired or not."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close database connections."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if database is healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass
