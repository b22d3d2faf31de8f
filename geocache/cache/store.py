"""Named in-process key-value caches backing the geocoding results."""

import threading
from collections.abc import Iterable
from typing import Protocol


class CacheStoreError(Exception):
    """The cache store could not complete an operation."""


class CacheStore(Protocol):
    """Operations the eviction tracker and read-through layer rely on."""

    def get(self, cache_name: str, key: str) -> object | None: ...

    def put(self, cache_name: str, key: str, value: object) -> None: ...

    def evict(self, cache_name: str, key: str) -> bool: ...

    def exists(self, cache_name: str) -> bool: ...


class InMemoryCacheStore:
    """Dictionary-backed store holding one namespace per cache name.

    Expiry and size limits are not enforced here; the eviction tracker
    decides what to remove.

    Args:
        cache_names: Names of the caches to create up front.
    """

    def __init__(self, cache_names: Iterable[str] = ()) -> None:
        self._caches: dict[str, dict[str, object]] = {
            name: {} for name in cache_names
        }
        self._lock = threading.Lock()

    def _cache(self, cache_name: str) -> dict[str, object]:
        cache = self._caches.get(cache_name)
        if cache is None:
            raise CacheStoreError(f"Cache '{cache_name}' does not exist")
        return cache

    def get(self, cache_name: str, key: str) -> object | None:
        """Return the stored value or None when *key* is absent.

        Raises:
            CacheStoreError: If *cache_name* does not exist.
        """
        with self._lock:
            return self._cache(cache_name).get(key)

    def put(self, cache_name: str, key: str, value: object) -> None:
        """Store *value* under *key*, replacing any previous value.

        Raises:
            CacheStoreError: If *cache_name* does not exist.
        """
        with self._lock:
            self._cache(cache_name)[key] = value

    def evict(self, cache_name: str, key: str) -> bool:
        """Remove *key*. Returns True if it was present, False if already absent.

        Raises:
            CacheStoreError: If *cache_name* does not exist.
        """
        with self._lock:
            cache = self._cache(cache_name)
            if key in cache:
                del cache[key]
                return True
            return False

    def exists(self, cache_name: str) -> bool:
        with self._lock:
            return cache_name in self._caches

    def contains(self, cache_name: str, key: str) -> bool:
        with self._lock:
            return key in self._cache(cache_name)

    def size(self, cache_name: str) -> int:
        """Current number of entries in *cache_name*."""
        with self._lock:
            return len(self._cache(cache_name))
