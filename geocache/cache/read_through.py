import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from geocache.cache.store import CacheStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def skip_none(key: str, value: object | None) -> bool:
    """Default predicate: never store a missing result."""
    return value is None


async def read_through(
    store: CacheStore,
    cache_name: str,
    key: str,
    loader: Callable[[], Awaitable[T]],
    skip_cache: Callable[[str, T | None], bool] = skip_none,
    on_store: Callable[[str], None] | None = None,
) -> T:
    """Return the cached value for *key*, loading and storing it on a miss.

    Args:
        store: Backing cache store.
        cache_name: Namespace within the store.
        key: Cache key.
        loader: Async callable producing the value on a miss. Its errors
            propagate unchanged.
        skip_cache: Predicate ``(key, value) -> bool``; when true the loaded
            value is returned but not stored.
        on_store: Called with *key* right after the value is stored, before
            any other task can run.

    Returns:
        The cached or freshly loaded value.
    """
    cached = store.get(cache_name, key)
    if cached is not None:
        logger.debug("Cache hit in %s: %s", cache_name, key)
        return cached  # type: ignore[return-value]

    value = await loader()
    if skip_cache(key, value):
        logger.debug("Not caching result in %s for key: %s", cache_name, key)
        return value

    store.put(cache_name, key, value)
    if on_store is not None:
        on_store(key)
    return value
