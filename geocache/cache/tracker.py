import time

from geocache.cache.eviction import EvictionPolicy, SweepResult, sweep
from geocache.cache.ledger import AccessTimeLedger, Clock
from geocache.cache.store import CacheStore


class TrackedCache:
    """One logical cache: its name, access ledger, backing store and policy.

    Args:
        name: Cache name in the store (e.g. ``"geocoding"``).
        store: Store holding the cached values.
        policy: Size and age limits enforced by :meth:`sweep`.
        clock: Timestamp source for the ledger.
    """

    def __init__(
        self,
        name: str,
        store: CacheStore,
        policy: EvictionPolicy,
        clock: Clock = time.monotonic,
    ) -> None:
        self.name = name
        self.store = store
        self.policy = policy
        self.ledger = AccessTimeLedger(clock)

    def touch(self, key: str) -> None:
        self.ledger.touch(key)

    def sweep(self) -> SweepResult:
        return sweep(self.name, self.ledger, self.store, self.policy)

    def __repr__(self) -> str:
        return f"TrackedCache({self.name!r}, tracked={self.ledger.size()})"
