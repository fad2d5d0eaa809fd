"""
Tests for the size-bounded LRU cache.
"""

import hashlib
import threading

import pytest

from tilesrv.cache.lru import LRUCache, fingerprint


def md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class TestGetSet:
    """Tests for storing and reading entries."""

    def test_get_set(self, cache):
        """Test that stored values come back with their fingerprints."""
        cache.set("a", b"aaaaaaaa")
        cache.set("b", b"bbbbbbbb")
        cache.set("c", b"cccccccc")

        assert cache.get("a") == (b"aaaaaaaa", md5(b"aaaaaaaa"))
        assert cache.get("b") == (b"bbbbbbbb", md5(b"bbbbbbbb"))
        assert cache.get("c") == (b"cccccccc", md5(b"cccccccc"))

    def test_set_returns_fingerprint(self, cache):
        """Test that set returns the fingerprint of the stored value."""
        assert cache.set("a", b"payload") == md5(b"payload")
        assert fingerprint(b"payload") == md5(b"payload")

    def test_replace(self, cache):
        """Test that setting an existing key replaces value and fingerprint."""
        cache.set("a", b"aaaaaaaa")
        assert cache.get("a")[0] == b"aaaaaaaa"

        cache.set("a", b"bbbb")
        assert cache.get("a") == (b"bbbb", md5(b"bbbb"))
        assert cache.status().elements == 1
        assert cache.status().size == 4

    def test_get_nonexistent(self, cache):
        """Test lookups of unknown keys."""
        cache.set("a", b"aaaaaaaa")

        assert cache.get("b") is None
        assert not cache.exists("b")
        assert cache.exists("a")

    def test_empty_value(self, cache):
        """Test that an empty payload is a valid entry."""
        cache.set("empty", b"")

        assert cache.get("empty") == (b"", md5(b""))
        assert cache.status().size == 0

    def test_accepts_bytearray(self, cache):
        """Test that mutable buffers are copied into immutable bytes."""
        buf = bytearray(b"abc")
        cache.set("a", buf)
        buf[0] = ord("z")

        assert cache.get("a") == (b"abc", md5(b"abc"))

    def test_negative_capacity_rejected(self):
        """Test that a negative capacity is refused."""
        with pytest.raises(ValueError):
            LRUCache(-1)


class TestRecency:
    """Tests for recency ordering and eviction."""

    def test_eviction(self):
        """Test that the least recently used entry is evicted first."""
        cache = LRUCache(1024)
        data = bytes(256)

        for key in "abcd":
            cache.set(key, data)

        for key in "dcba":
            cache.get(key)

        assert cache.keys() == ["d", "c", "b", "a"]
        assert cache.status().size == 1024

        cache.set("e", data)

        assert not cache.exists("d")
        assert cache.exists("e")
        assert cache.keys() == ["c", "b", "a", "e"]
        assert cache.status().size == 1024

    def test_exists_does_not_touch_recency(self):
        """Test that membership checks leave the order alone."""
        cache = LRUCache(512)
        cache.set("a", bytes(256))
        cache.set("b", bytes(256))

        assert cache.exists("a")
        cache.set("c", bytes(256))

        assert not cache.exists("a")
        assert cache.exists("b")

    def test_replace_moves_to_front(self):
        """Test that replacing a value makes it the most recent entry."""
        cache = LRUCache(768)
        for key in "abc":
            cache.set(key, bytes(256))

        cache.set("a", bytes(256))
        cache.set("d", bytes(256))

        assert cache.exists("a")
        assert not cache.exists("b")

    def test_replace_subtracts_old_size_before_eviction(self):
        """Test that shrinking a value in a full cache evicts nothing."""
        cache = LRUCache(1024)
        for key in "abcd":
            cache.set(key, bytes(256))

        cache.set("a", bytes(128))

        assert cache.status().elements == 4
        assert cache.status().size == 896

    def test_oversized_value_evicts_everything(self):
        """Test that a value larger than the capacity never stays resident."""
        cache = LRUCache(1024)
        cache.set("a", bytes(256))
        cache.set("b", bytes(256))

        digest = cache.set("huge", bytes(2048))

        assert digest == md5(bytes(2048))
        assert cache.status().elements == 0
        assert cache.status().size == 0

    def test_zero_capacity(self):
        """Test that a zero capacity cache keeps nothing but empty payloads."""
        cache = LRUCache(0)

        cache.set("a", b"x")
        cache.set("b", b"")

        assert not cache.exists("a")
        assert cache.exists("b")
        assert cache.status().size == 0

    def test_size_never_exceeds_capacity(self):
        """Test the size invariant over a mixed sequence of inserts."""
        cache = LRUCache(1000)
        resident: dict[str, bytes] = {}

        for i in range(200):
            key = f"k{i % 37}"
            value = bytes((i * 7) % 300)
            cache.set(key, value)
            resident[key] = value

            status = cache.status()
            assert status.size <= 1000
            assert status.size == sum(len(resident[k]) for k in cache.keys())


class TestDeleteClearStatus:
    """Tests for removal and status reporting."""

    def test_delete(self, cache):
        """Test that deleting releases the entry and its bytes."""
        cache.set("a", bytes(256))
        cache.set("b", bytes(256))

        assert cache.delete("a")
        assert not cache.exists("a")
        assert cache.status().size == 256
        assert cache.status().elements == 1

    def test_delete_missing_is_noop(self, cache):
        """Test that deleting an unknown key changes nothing."""
        cache.set("a", bytes(256))

        assert not cache.delete("zzz")
        assert cache.status().elements == 1

    def test_clear(self, cache):
        """Test that clear removes every entry."""
        data = bytes(256)
        for key in "abcd":
            cache.set(key, data)

        assert len(cache) == 4
        assert cache.status().size == 1024

        assert cache.clear() == 4

        assert len(cache) == 0
        assert cache.status().size == 0
        for key in "abcd":
            assert not cache.exists(key)
            assert key not in cache

    def test_status(self, cache):
        """Test status snapshots before and after clearing."""
        data = bytes(256)
        cache.set("a", data)
        cache.set("b", data)
        cache.set("c", data)

        status = cache.status()
        assert status.elements == 3
        assert status.size == 768
        assert status.max_size == 1024

        cache.clear()

        status = cache.status()
        assert (status.elements, status.size, status.max_size) == (0, 0, 1024)

    def test_status_to_dict(self, cache):
        """Test the status endpoint representation."""
        cache.set("a", bytes(10))

        assert cache.status().to_dict() == {
            "elementCount": 1,
            "currentBytes": 10,
            "maxBytes": 1024,
        }


class TestConcurrency:
    """Tests for concurrent access."""

    def test_concurrent_writers_keep_invariants(self):
        """Test that parallel sets never break size accounting."""
        cache = LRUCache(4096)
        errors: list[AssertionError] = []

        def writer(worker: int) -> None:
            for i in range(300):
                key = f"{worker}-{i % 20}"
                cache.set(key, bytes((worker * 31 + i) % 200))
                result = cache.get(key)
                if result is not None:
                    value, digest = result
                    if digest != md5(value):
                        errors.append(AssertionError(f"fingerprint mismatch for {key}"))

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        status = cache.status()
        assert status.size <= 4096
        assert status.elements == len(cache.keys())
        assert status.size == sum(len(cache.get(k)[0]) for k in cache.keys())
