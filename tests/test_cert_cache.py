"""Tests for the signing certificate cache.

- Primary key: leaf fingerprint
- Secondary index: chain URL → fingerprint
- LRU eviction
- TTL expiration
"""

import asyncio
import dataclasses

import pytest

from voicegate.skill.cert import CacheConfig, CertificateCache

from .conftest import CERT_URL


@pytest.fixture
def cache():
    """Create a fresh cache for each test."""
    return CertificateCache(CacheConfig(ttl_seconds=300, max_entries=10))


@pytest.fixture
def small_cache():
    """Create a cache with small max_entries for eviction tests."""
    return CertificateCache(CacheConfig(ttl_seconds=300, max_entries=3))


@pytest.fixture
def short_ttl_cache():
    """Create a cache with short TTL for expiration tests."""
    return CertificateCache(CacheConfig(ttl_seconds=1, max_entries=10))


@pytest.fixture
def make_cert(trusted_certificate):
    """Factory for cache entries differing in fingerprint and URL."""
    def _make(fingerprint: str, url: str = CERT_URL):
        return dataclasses.replace(trusted_certificate, fingerprint=fingerprint, chain_url=url)
    return _make


def url(n: int) -> str:
    return f"https://s3.amazonaws.com/echo.api/cert-{n}.pem"


class TestCacheBasicOperations:
    """Tests for basic cache put/get operations."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, cache, trusted_certificate):
        await cache.put(trusted_certificate)

        result = await cache.get(CERT_URL)
        assert result is trusted_certificate

    @pytest.mark.asyncio
    async def test_get_nonexistent_returns_none(self, cache):
        assert await cache.get(CERT_URL) is None

    @pytest.mark.asyncio
    async def test_put_same_fingerprint_replaces(self, cache, make_cert):
        """Two verifications of one chain leave a single entry."""
        await cache.put(make_cert("aa"))
        await cache.put(make_cert("aa"))

        assert cache.size == 1

    @pytest.mark.asyncio
    async def test_same_certificate_under_two_urls(self, cache, make_cert):
        await cache.put(make_cert("aa", url(1)))
        await cache.put(make_cert("aa", url(2)))

        assert cache.size == 1
        assert (await cache.get(url(1))).fingerprint == "aa"
        assert (await cache.get(url(2))).fingerprint == "aa"

    @pytest.mark.asyncio
    async def test_url_rotated_to_new_certificate(self, cache, make_cert):
        """A URL that now serves a new certificate drops the old entry."""
        await cache.put(make_cert("old"))
        await cache.put(make_cert("new"))

        assert cache.size == 1
        assert (await cache.get(CERT_URL)).fingerprint == "new"

    @pytest.mark.asyncio
    async def test_concurrent_puts(self, cache, make_cert):
        await asyncio.gather(*(cache.put(make_cert("aa")) for _ in range(10)))
        assert cache.size == 1


class TestCacheInvalidation:
    """Tests for invalidate() and clear()."""

    @pytest.mark.asyncio
    async def test_invalidate_removes_all_urls(self, cache, make_cert):
        await cache.put(make_cert("aa", url(1)))
        await cache.put(make_cert("aa", url(2)))
        await cache.put(make_cert("bb", url(3)))

        await cache.invalidate("aa")

        assert await cache.get(url(1)) is None
        assert await cache.get(url(2)) is None
        assert (await cache.get(url(3))).fingerprint == "bb"
        assert cache.size == 1

    @pytest.mark.asyncio
    async def test_invalidate_nonexistent(self, cache):
        await cache.invalidate("missing")
        assert cache.size == 0

    @pytest.mark.asyncio
    async def test_clear_removes_all(self, cache, make_cert):
        for i in range(5):
            await cache.put(make_cert(f"fp{i}", url(i)))
        assert cache.size == 5

        await cache.clear()

        assert cache.size == 0
        assert await cache.get(url(0)) is None


class TestCacheLRUEviction:
    """Tests for LRU eviction when cache is full."""

    @pytest.mark.asyncio
    async def test_eviction_when_full(self, small_cache, make_cert):
        for i in range(3):
            await small_cache.put(make_cert(f"fp{i}", url(i)))

        await small_cache.put(make_cert("fp3", url(3)))

        assert small_cache.size == 3
        assert await small_cache.get(url(0)) is None
        assert await small_cache.get(url(3)) is not None

    @pytest.mark.asyncio
    async def test_access_updates_lru_order(self, small_cache, make_cert):
        for i in range(3):
            await small_cache.put(make_cert(f"fp{i}", url(i)))

        # Touch the oldest so fp1 becomes least recently used
        await small_cache.get(url(0))
        await small_cache.put(make_cert("fp3", url(3)))

        assert await small_cache.get(url(0)) is not None
        assert await small_cache.get(url(1)) is None


class TestCacheTTL:
    """Tests for TTL expiration."""

    @pytest.mark.asyncio
    async def test_expired_entry_returns_none(self, short_ttl_cache, trusted_certificate):
        await short_ttl_cache.put(trusted_certificate)
        assert await short_ttl_cache.get(CERT_URL) is not None

        await asyncio.sleep(1.5)

        assert await short_ttl_cache.get(CERT_URL) is None

    @pytest.mark.asyncio
    async def test_expired_entry_removed_on_access(self, short_ttl_cache, trusted_certificate):
        await short_ttl_cache.put(trusted_certificate)
        await asyncio.sleep(1.5)

        await short_ttl_cache.get(CERT_URL)

        assert short_ttl_cache.size == 0
