"""Business logic service for Openly links."""

import logging
from typing import Optional, List, Dict

from .shortid import ShortIDGenerator
from .sessions import AuthResult
from .database.base import OpenlyDBBase
from .database.cache import RedisCache
from .database.models import Link
from .errors import (
    DuplicateShortIDError,
    LinkCreationError,
    NotAuthenticatedError,
    StorageError,
)


class LinkService:
    """Service layer for creating, listing, deleting and resolving links."""

    def __init__(
        self,
        db: OpenlyDBBase,
        cache: Optional[RedisCache] = None,
        short_id_generator: Optional[ShortIDGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 3,
    ):
        """Initialize link service.

        Args:
            db: Database instance
            cache: Optional cache instance
            short_id_generator: Optional short ID generator
            logger: Optional logger
            max_collision_retries: Fresh IDs to try after a collision (0 = none)
        """
        self.db = db
        self.cache = cache
        self.generator = short_id_generator or ShortIDGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries

    @staticmethod
    def _require_admin(actor: AuthResult) -> None:
        if actor is None or not actor.authenticated:
            raise NotAuthenticatedError("Admin login required")

    async def create(self, long_url: str, actor: AuthResult) -> str:
        """Create a short link for long_url.

        The URL is stored verbatim. A short ID collision is retried with a
        fresh ID up to max_collision_retries times.

        Args:
            long_url: The target URL
            actor: Authentication result of the caller

        Returns:
            The new short ID

        Raises:
            NotAuthenticatedError: If actor is not the admin
            LinkCreationError: If the link could not be stored
        """
        self._require_admin(actor)

        if not long_url:
            self.logger.warning("Refusing to shorten an empty URL")
            raise LinkCreationError("Empty URL")

        last_error = None
        for attempt in range(self.max_collision_retries + 1):
            short_id = self.generator.generate()
            try:
                await self.db.create_link(short_id, long_url)
            except DuplicateShortIDError as e:
                self.logger.warning(f"Short ID collision on attempt {attempt + 1}: {short_id}")
                last_error = e
                continue
            except StorageError as e:
                self.logger.error(f"Failed to create link for {long_url}: {e}")
                raise LinkCreationError("Failed to create link") from e

            self.logger.info(f"Created short link: {short_id} -> {long_url}")
            return short_id

        self.logger.error(
            f"Failed to create link for {long_url}: "
            f"{self.max_collision_retries + 1} colliding short ID(s)"
        )
        raise LinkCreationError("Failed to create link") from last_error

    async def list(self, actor: AuthResult) -> List[Link]:
        """All links in storage order.

        Raises:
            NotAuthenticatedError: If actor is not the admin
            StorageError: If the links cannot be read
        """
        self._require_admin(actor)
        return await self.db.list_links()

    async def delete(self, link_id: int, actor: AuthResult) -> None:
        """Delete a link by numeric id. Unknown ids are a no-op.

        Raises:
            NotAuthenticatedError: If actor is not the admin
            StorageError: If the delete fails
        """
        self._require_admin(actor)

        short_id = await self.db.delete_link(link_id)
        if short_id is None:
            return

        if self.cache:
            await self.cache.delete(short_id)
        self.logger.info(f"Deleted short link {link_id}: {short_id}")

    async def resolve(self, short_id: str) -> Optional[str]:
        """Long URL for an exact short ID, or None if there is none.

        Raises:
            StorageError: If the lookup fails
        """
        if self.cache:
            cached_url = await self.cache.get(short_id)
            if cached_url:
                self.logger.debug(f"Cache hit for {short_id}")
                return cached_url

        link = await self.db.get_link(short_id)
        if link is None:
            self.logger.info(f"Short ID not found: {short_id}")
            return None

        if self.cache and await self.cache.set(short_id, link.long_url):
            # A delete may have committed and evicted before the set landed
            if await self.db.get_link(short_id) is None:
                await self.cache.delete(short_id)
                self.logger.info(f"Short ID deleted during lookup: {short_id}")
                return None

        self.logger.debug(f"Resolved {short_id} -> {link.long_url}")
        return link.long_url

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check()
        cache_healthy = await self.cache.ping() if self.cache else True

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
        if self.cache:
            await self.cache.close()
