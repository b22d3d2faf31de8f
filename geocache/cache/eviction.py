"""Eviction sweep: trims a logical cache back within its size and age limits.

A sweep snapshots the access-time ledger, then evicts the least recently
used keys from the cache store, oldest first, while the cache holds more
than ``max_entries`` keys or its oldest key has reached ``time_to_live``.
Each key is evicted from the store before it is dropped from the ledger,
and a key read again since the snapshot keeps its newer ledger entry.

A store fault stops the sweep immediately. The failing key stays in the
ledger so the next sweep retries it, and the fault is reported in the
returned :class:`SweepResult` rather than raised.
"""

import logging
from collections import deque
from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field

from geocache.cache.ledger import AccessTimeLedger
from geocache.cache.store import CacheStore

logger = logging.getLogger(__name__)


class EvictionFailure(Exception):
    """The cache store failed to evict a key selected by a sweep."""

    def __init__(self, cache_name: str, key: str, cause: Exception) -> None:
        super().__init__(
            f"Cache eviction failed for cache {cache_name} (key {key!r}): {cause}"
        )
        self.cache_name = cache_name
        self.key = key
        self.cause = cause


class EvictionPolicy(BaseModel):
    """Size cap and time-to-live applied to each logical cache."""

    model_config = ConfigDict(frozen=True)

    max_entries: int = Field(default=10, ge=0)
    time_to_live: timedelta = timedelta(minutes=5)

    @property
    def ttl_seconds(self) -> float:
        return self.time_to_live.total_seconds()


class SweepResult(BaseModel):
    """Outcome of one sweep over one logical cache."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    cache_name: str
    evicted: tuple[str, ...] = ()
    failure: EvictionFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def sweep(
    cache_name: str,
    ledger: AccessTimeLedger,
    store: CacheStore,
    policy: EvictionPolicy,
) -> SweepResult:
    """Evict stale entries from *cache_name* until it satisfies *policy*.

    Only the snapshot taken at the start is consulted; keys touched while
    the sweep runs are left for the next one.

    Returns:
        A SweepResult listing the evicted keys, with ``failure`` set if the
        store raised while evicting.
    """
    entries = ledger.snapshot()
    if not entries:
        return SweepResult(cache_name=cache_name)

    if not store.exists(cache_name):
        logger.error("Cache %s not found in cache store", cache_name)
        return SweepResult(cache_name=cache_name)

    now = ledger.clock()
    ttl = policy.ttl_seconds
    remaining = deque(entries)
    evicted: list[str] = []

    while remaining and (
        len(remaining) > policy.max_entries
        or now - remaining[0].accessed_at >= ttl
    ):
        key, accessed_at = remaining[0]
        try:
            present = store.evict(cache_name, key)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to evict cache entry for key %s: %s", key, exc)
            return SweepResult(
                cache_name=cache_name,
                evicted=tuple(evicted),
                failure=EvictionFailure(cache_name, key, exc),
            )

        if not ledger.remove_if_unchanged(key, accessed_at):
            logger.debug("Kept %s in %s ledger; it was read during the sweep", key, cache_name)
        remaining.popleft()
        evicted.append(key)
        if present:
            logger.info("Evicted stale cache entry from %s: %s", cache_name, key)
        else:
            # Never stored (bypassed or null result); only the ledger held it
            logger.debug("Dropped untracked key from %s ledger: %s", cache_name, key)

    return SweepResult(cache_name=cache_name, evicted=tuple(evicted))
