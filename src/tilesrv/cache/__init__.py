"""
Cache module for storing tile payloads.

Provides an in-memory, size-bounded LRU cache with content fingerprints.
"""

from tilesrv.cache.lru import LRUCache, fingerprint

__all__ = ["LRUCache", "fingerprint"]
