"""Tests for the link service."""

import asyncio
import re
import pytest
from unittest.mock import AsyncMock

from openly.errors import LinkCreationError, NotAuthenticatedError, StorageError
from openly.service import LinkService
from openly.shortid import ShortIDGenerator


class SequenceGenerator(ShortIDGenerator):
    """Hands out a fixed sequence of IDs."""

    def __init__(self, codes):
        super().__init__()
        self.codes = list(codes)

    def generate(self, length=None):
        return self.codes.pop(0)


class DictCache:
    """In-memory stand-in for RedisCache."""

    def __init__(self):
        self.data = {}

    async def get(self, short_id):
        return self.data.get(short_id)

    async def set(self, short_id, long_url):
        self.data[short_id] = long_url
        return True

    async def delete(self, short_id):
        return self.data.pop(short_id, None) is not None

    async def close(self):
        pass


class TestCreateAndResolve:
    """Creating and following links."""

    @pytest.mark.asyncio
    async def test_create_then_resolve(self, service, admin, sample_urls):
        for url in sample_urls:
            short_id = await service.create(url, admin)

            assert re.fullmatch(r"[a-z0-9]{6}", short_id)
            assert await service.resolve(short_id) == url

    @pytest.mark.asyncio
    async def test_resolve_unknown(self, service):
        assert await service.resolve("zzzzzz") is None

    @pytest.mark.asyncio
    async def test_long_url_stored_verbatim(self, service, admin):
        """No validation or normalization of the target."""
        url = "not even a url  "
        short_id = await service.create(url, admin)

        assert await service.resolve(short_id) == url

    @pytest.mark.asyncio
    async def test_empty_url_rejected(self, service, admin, test_db):
        with pytest.raises(LinkCreationError):
            await service.create("", admin)

        assert await test_db.list_links() == []

    @pytest.mark.asyncio
    async def test_create_requires_admin(self, service, anonymous, test_db):
        with pytest.raises(NotAuthenticatedError):
            await service.create("https://example.com", anonymous)

        assert await test_db.list_links() == []

    @pytest.mark.asyncio
    async def test_storage_failure_is_generic(self, admin, logger):
        db = AsyncMock()
        db.create_link.side_effect = StorageError("disk full")
        service = LinkService(db=db, logger=logger)

        with pytest.raises(LinkCreationError) as excinfo:
            await service.create("https://example.com", admin)

        assert "disk full" not in str(excinfo.value)
        db.create_link.assert_awaited_once()


class TestCollisions:
    """Short ID collisions."""

    @pytest.mark.asyncio
    async def test_collision_retried_with_fresh_id(self, test_db, admin, logger):
        await test_db.create_link("aaaaaa", "https://first.example.com")
        service = LinkService(
            db=test_db,
            short_id_generator=SequenceGenerator(["aaaaaa", "aaaaaa", "bbbbbb"]),
            logger=logger,
            max_collision_retries=3,
        )

        short_id = await service.create("https://second.example.com", admin)

        assert short_id == "bbbbbb"
        assert await service.resolve("aaaaaa") == "https://first.example.com"
        assert await service.resolve("bbbbbb") == "https://second.example.com"

    @pytest.mark.asyncio
    async def test_collision_fails_without_retries(self, test_db, admin, logger):
        await test_db.create_link("aaaaaa", "https://first.example.com")
        service = LinkService(
            db=test_db,
            short_id_generator=SequenceGenerator(["aaaaaa", "bbbbbb"]),
            logger=logger,
            max_collision_retries=0,
        )

        with pytest.raises(LinkCreationError):
            await service.create("https://second.example.com", admin)

        links = await test_db.list_links()
        assert [link.short_id for link in links] == ["aaaaaa"]

    @pytest.mark.asyncio
    async def test_collision_retries_exhausted(self, test_db, admin, logger):
        await test_db.create_link("aaaaaa", "https://first.example.com")
        service = LinkService(
            db=test_db,
            short_id_generator=SequenceGenerator(["aaaaaa"] * 3),
            logger=logger,
            max_collision_retries=2,
        )

        with pytest.raises(LinkCreationError):
            await service.create("https://second.example.com", admin)

        assert len(await test_db.list_links()) == 1


class TestListAndDelete:
    """Admin listing and deletion."""

    @pytest.mark.asyncio
    async def test_list_in_creation_order(self, service, admin, sample_urls):
        created = [await service.create(url, admin) for url in sample_urls]

        links = await service.list(admin)

        assert [link.short_id for link in links] == created
        assert [link.long_url for link in links] == sample_urls

    @pytest.mark.asyncio
    async def test_list_requires_admin(self, service, anonymous):
        with pytest.raises(NotAuthenticatedError):
            await service.list(anonymous)

    @pytest.mark.asyncio
    async def test_delete(self, service, admin, sample_urls):
        short_id = await service.create(sample_urls[0], admin)
        link = (await service.list(admin))[0]

        await service.delete(link.id, admin)

        assert await service.resolve(short_id) is None
        assert await service.list(admin) == []

    @pytest.mark.asyncio
    async def test_delete_unknown_is_noop(self, service, admin, sample_urls):
        await service.create(sample_urls[0], admin)

        await service.delete(12345, admin)

        assert len(await service.list(admin)) == 1

    @pytest.mark.asyncio
    async def test_delete_requires_admin(self, service, admin, anonymous, sample_urls):
        await service.create(sample_urls[0], admin)
        link = (await service.list(admin))[0]

        with pytest.raises(NotAuthenticatedError):
            await service.delete(link.id, anonymous)

        assert len(await service.list(admin)) == 1


class TestCache:
    """Read-through cache interplay."""

    @pytest.mark.asyncio
    async def test_cache_hit_skips_database(self, logger):
        db = AsyncMock()
        cache = AsyncMock()
        cache.get.return_value = "https://cached.example.com"
        service = LinkService(db=db, cache=cache, logger=logger)

        assert await service.resolve("abc123") == "https://cached.example.com"
        db.get_link.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cache_filled_on_miss(self, test_db, admin, logger):
        cache = AsyncMock()
        cache.get.return_value = None
        service = LinkService(db=test_db, cache=cache, logger=logger)

        short_id = await service.create("https://example.com", admin)
        await service.resolve(short_id)

        cache.set.assert_awaited_once_with(short_id, "https://example.com")

    @pytest.mark.asyncio
    async def test_delete_evicts_cache(self, test_db, admin, logger):
        cache = AsyncMock()
        service = LinkService(db=test_db, cache=cache, logger=logger)

        short_id = await service.create("https://example.com", admin)
        link = (await service.list(admin))[0]
        await service.delete(link.id, admin)

        cache.delete.assert_awaited_once_with(short_id)

    @pytest.mark.asyncio
    async def test_delete_during_lookup_leaves_no_cache_entry(self, test_db, admin, logger, monkeypatch):
        """A delete landing between the row read and the cache fill wins."""
        cache = DictCache()
        service = LinkService(db=test_db, cache=cache, logger=logger)
        short_id = await service.create("https://example.com", admin)
        link = (await service.list(admin))[0]

        row_read = asyncio.Event()
        release = asyncio.Event()
        real_get_link = test_db.get_link
        calls = []

        async def slow_get_link(code):
            found = await real_get_link(code)
            calls.append(code)
            if len(calls) == 1:
                row_read.set()
                await release.wait()
            return found

        monkeypatch.setattr(test_db, "get_link", slow_get_link)

        lookup = asyncio.create_task(service.resolve(short_id))
        await row_read.wait()
        await service.delete(link.id, admin)
        release.set()
        await lookup

        assert short_id not in cache.data
        assert await service.resolve(short_id) is None


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_concurrent_creates(self, service, admin):
        """Concurrent creates each get a distinct, resolvable short ID."""
        urls = [f"https://example.com/page_{i}" for i in range(30)]

        results = await asyncio.gather(
            *(service.create(url, admin) for url in urls), return_exceptions=True
        )

        for result in results:
            assert not isinstance(result, Exception) or isinstance(result, LinkCreationError)
        short_ids = [r for r in results if isinstance(r, str)]
        assert len(short_ids) == len(set(short_ids))

        links = await service.list(admin)
        assert len(links) == len(short_ids)
        for short_id, url in zip(results, urls):
            if isinstance(short_id, str):
                assert await service.resolve(short_id) == url


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_check(self, service):
        health = await service.health_check()

        assert health == {"database": True, "cache": True, "overall": True}
