"""Cached geocoding and reverse geocoding.

Every read touches the key in its logical cache's access ledger, runs a
best-effort eviction sweep on that same cache, and then goes through the
read-through layer, which calls the provider only on a miss.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from geocache.cache.eviction import EvictionPolicy
from geocache.cache.ledger import Clock
from geocache.cache.read_through import read_through, skip_none
from geocache.cache.store import CacheStore
from geocache.cache.tracker import TrackedCache
from geocache.clients.geocoding import GeocodingClient
from geocache.keys import (
    GEOCODING_CACHE,
    REVERSE_GEOCODING_CACHE,
    geocoding_key,
    reverse_geocoding_key,
)
from geocache.models.geocoding import Location, ReverseAddress, to_address, to_location

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BYPASS_TOKEN = "goa"


class GeocodingService:
    """Owns the two tracked caches and serves reads through them.

    Args:
        client: Provider client used on cache misses.
        store: Store backing both logical caches.
        policy: Eviction limits applied to each cache independently.
        bypass_token: Address whose results are never cached (case-insensitive).
        clock: Timestamp source for both ledgers.
    """

    def __init__(
        self,
        client: GeocodingClient,
        store: CacheStore,
        policy: EvictionPolicy | None = None,
        bypass_token: str = DEFAULT_BYPASS_TOKEN,
        clock: Clock = time.monotonic,
    ) -> None:
        self.client = client
        self.store = store
        self.policy = policy or EvictionPolicy()
        self.bypass_token = bypass_token
        self.geocoding = TrackedCache(GEOCODING_CACHE, store, self.policy, clock)
        self.reverse_geocoding = TrackedCache(
            REVERSE_GEOCODING_CACHE, store, self.policy, clock
        )

    def is_bypassed(self, key: str) -> bool:
        return key.casefold() == self.bypass_token.casefold()

    def _skip_geocoding_cache(self, key: str, value: object | None) -> bool:
        return value is None or self.is_bypassed(key)

    async def _read(
        self,
        cache: TrackedCache,
        key: str,
        loader: Callable[[], Awaitable[T]],
        skip_cache: Callable[[str, T | None], bool],
    ) -> T:
        cache.touch(key)

        result = cache.sweep()
        if not result.ok:
            logger.error("Error during %s cache cleanup: %s", cache.name, result.failure)

        # Re-touch on store: a concurrent sweep may have dropped the key while
        # the loader was in flight
        return await read_through(
            cache.store, cache.name, key, loader, skip_cache, on_store=cache.touch
        )

    async def get_geocoding(self, address: str) -> Location:
        """Return the coordinates of *address*.

        Raises:
            InvalidKeyError: If *address* is blank.
            APIError: If the provider lookup fails on a cache miss.
        """
        key = geocoding_key(address)

        async def load() -> Location:
            logger.info("Fetching geocoding data for address: %s", key)
            return to_location(await self.client.geocode(key))

        return await self._read(self.geocoding, key, load, self._skip_geocoding_cache)

    async def get_reverse_geocoding(
        self, latitude: float, longitude: float
    ) -> ReverseAddress:
        """Return the address at the given coordinates.

        Raises:
            InvalidKeyError: If either coordinate is missing or out of range.
            APIError: If the provider lookup fails on a cache miss.
        """
        key = reverse_geocoding_key(latitude, longitude)

        async def load() -> ReverseAddress:
            logger.info(
                "Fetching reverse geocoding data for latitude: %s and longitude: %s",
                latitude, longitude,
            )
            return to_address(
                await self.client.reverse_geocode(float(latitude), float(longitude))
            )

        return await self._read(self.reverse_geocoding, key, load, skip_none)
