"""Cache of verified signing certificates.

The cache uses a two-level keying strategy:
- Primary key: leaf fingerprint - at most one entry per certificate
- Secondary index: chain URL → fingerprint for lookups before fetching

Entries are read-only once inserted. The cache never decides whether a
certificate is still acceptable: callers re-check the validity interval on
every hit against their own clock.

TTL expiry and LRU bookkeeping use the wall clock (datetime.now), not the
``now`` injected into the verifier, so tests that pin ``now`` still see
entries expire by TTL on real time only.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from .models import TrustedCertificate


@dataclass
class CacheConfig:
    """Configuration for the certificate cache.

    Attributes:
        ttl_seconds: Time-to-live for cache entries.
        max_entries: Maximum entries before LRU eviction.
    """
    ttl_seconds: int = 3600
    max_entries: int = 32


@dataclass
class _CacheEntry:
    """Internal cache entry with metadata.

    Attributes:
        certificate: The cached TrustedCertificate.
        expires_at: Timestamp when this entry expires.
        last_access: Timestamp of last access (for LRU).
    """
    certificate: TrustedCertificate
    expires_at: datetime
    last_access: datetime


class CertificateCache:
    """asyncio-safe cache for verified signing certificates.

    Concurrent verifications of the same chain are not serialized: each
    verifies independently and then calls put(), which inserts or replaces.
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        self._config = config or CacheConfig()
        # Primary index: fingerprint → entry
        self._entries: Dict[str, _CacheEntry] = {}
        # Secondary index: chain URL → fingerprint
        self._url_index: Dict[str, str] = {}
        # Access order for LRU (most recent at end)
        self._access_order: list[str] = []
        self._lock = asyncio.Lock()

    async def get(self, chain_url: str) -> Optional[TrustedCertificate]:
        """Get the cached certificate last verified for ``chain_url``.

        Returns:
            TrustedCertificate if cached and the entry TTL has not passed.
        """
        async with self._lock:
            fingerprint = self._url_index.get(chain_url)
            if fingerprint is None:
                return None

            entry = self._entries.get(fingerprint)
            if entry is None:
                del self._url_index[chain_url]
                return None

            now = datetime.now(timezone.utc)
            if entry.expires_at < now:
                self._remove_entry(fingerprint)
                return None

            entry.last_access = now
            self._touch_access_order(fingerprint)
            return entry.certificate

    async def put(self, certificate: TrustedCertificate) -> None:
        """Insert or replace the entry for ``certificate.fingerprint``."""
        async with self._lock:
            now = datetime.now(timezone.utc)
            fingerprint = certificate.fingerprint

            if len(self._entries) >= self._config.max_entries and fingerprint not in self._entries:
                self._evict_lru()

            self._entries[fingerprint] = _CacheEntry(
                certificate=certificate,
                expires_at=now + timedelta(seconds=self._config.ttl_seconds),
                last_access=now,
            )
            self._touch_access_order(fingerprint)

            previous = self._url_index.get(certificate.chain_url)
            self._url_index[certificate.chain_url] = fingerprint
            if previous is not None and previous != fingerprint:
                # URL now serves a different certificate
                if previous not in self._url_index.values():
                    self._remove_entry(previous)

    async def invalidate(self, fingerprint: str) -> None:
        """Remove the entry for ``fingerprint`` and every URL pointing to it."""
        async with self._lock:
            self._remove_entry(fingerprint)

    def _remove_entry(self, fingerprint: str) -> None:
        """Remove entry from all indexes (caller must hold lock)."""
        self._entries.pop(fingerprint, None)
        if fingerprint in self._access_order:
            self._access_order.remove(fingerprint)
        for url in [u for u, f in self._url_index.items() if f == fingerprint]:
            del self._url_index[url]

    def _touch_access_order(self, fingerprint: str) -> None:
        """Move key to end of access order (caller must hold lock)."""
        if fingerprint in self._access_order:
            self._access_order.remove(fingerprint)
        self._access_order.append(fingerprint)

    def _evict_lru(self) -> None:
        """Evict least recently used entry (caller must hold lock)."""
        if self._access_order:
            self._remove_entry(self._access_order[0])

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            self._entries.clear()
            self._url_index.clear()
            self._access_order.clear()

    @property
    def size(self) -> int:
        """Current number of cached certificates."""
        return len(self._entries)
