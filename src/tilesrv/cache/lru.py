"""
In-memory LRU cache bounded by total payload size.

Entries are byte payloads stored alongside an MD5 fingerprint of their
content, suitable for use as an HTTP entity tag.
"""

import hashlib
import logging
import threading
from collections import OrderedDict
from typing import Optional

from tilesrv.core.models import CacheEntry, CacheStatus

logger = logging.getLogger(__name__)


def fingerprint(value: bytes) -> str:
    """Return the hex MD5 digest of a payload."""
    return hashlib.md5(value).hexdigest()


class LRUCache:
    """Thread-safe least-recently-used cache with a byte capacity.

    Recency is kept by an ordered mapping whose last item is the most
    recently used entry. Eviction happens inline with :meth:`set` and
    always removes the least recently used entry first.
    """

    def __init__(self, max_size: int):
        """Initialize the cache.

        Args:
            max_size: Capacity in bytes. Fixed for the lifetime of the cache.
        """
        if max_size < 0:
            raise ValueError(f"cache capacity cannot be negative: {max_size}")

        self._max_size = max_size
        self._size = 0
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

        logger.info("created a new cache: max size = %d bytes", max_size)

    @property
    def max_size(self) -> int:
        """Return the capacity in bytes."""
        return self._max_size

    def set(self, key: str, value: bytes) -> str:
        """Add or replace the entry for a key.

        The entry becomes the most recently used one. If the cache is over
        capacity afterwards, least recently used entries are evicted until
        it fits again.

        Args:
            key: Cache key.
            value: Payload to store.

        Returns:
            The fingerprint of the stored payload.
        """
        value = bytes(value)
        entry = CacheEntry(key=key, value=value, fingerprint=fingerprint(value))

        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._size -= previous.size

            self._entries[key] = entry
            self._size += entry.size

            while self._size > self._max_size and self._entries:
                _, evicted = self._entries.popitem(last=False)
                self._size -= evicted.size
                logger.debug("evicted cache entry: key = %s, size = %d", evicted.key, evicted.size)

        return entry.fingerprint

    def get(self, key: str) -> Optional[tuple[bytes, str]]:
        """Get the payload and fingerprint for a key.

        A hit marks the entry as most recently used.

        Args:
            key: Cache key.

        Returns:
            Tuple of (value, fingerprint) or None if the key is not cached.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return entry.value, entry.fingerprint

    def exists(self, key: str) -> bool:
        """Check whether a key is cached without touching its recency."""
        with self._lock:
            return key in self._entries

    def delete(self, key: str) -> bool:
        """Remove the entry for a key.

        Args:
            key: Cache key to delete.

        Returns:
            True if an entry was removed, False if the key was not cached.
        """
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is None:
                return False
            self._size -= entry.size
            return True

    def clear(self) -> int:
        """Remove all entries.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._size = 0
        return count

    def status(self) -> CacheStatus:
        """Return a consistent snapshot of element count, size and capacity."""
        with self._lock:
            return CacheStatus(
                elements=len(self._entries),
                size=self._size,
                max_size=self._max_size,
            )

    def keys(self) -> list[str]:
        """Return cached keys ordered from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.exists(key)
