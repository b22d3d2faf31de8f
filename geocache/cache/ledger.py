"""Per-cache ledger of last-access timestamps."""

import threading
import time
from collections.abc import Callable
from typing import NamedTuple

Clock = Callable[[], float]


class LedgerEntry(NamedTuple):
    key: str
    accessed_at: float


class AccessTimeLedger:
    """Thread-safe mapping from cache key to last access time.

    The internal lock is held only for the duration of a single operation,
    never across a sweep.

    Args:
        clock: Source of timestamps in seconds. Defaults to ``time.monotonic``.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self.clock = clock
        self._access_times: dict[str, float] = {}
        self._lock = threading.Lock()

    def touch(self, key: str) -> None:
        """Record an access to *key* now, overwriting any earlier timestamp."""
        now = self.clock()
        with self._lock:
            self._access_times[key] = now

    def snapshot(self) -> list[LedgerEntry]:
        """Return all entries sorted oldest first.

        Entries with the same timestamp are ordered by key.
        """
        with self._lock:
            items = list(self._access_times.items())
        entries = [LedgerEntry(key, ts) for key, ts in items]
        entries.sort(key=lambda e: (e.accessed_at, e.key))
        return entries

    def remove(self, key: str) -> None:
        """Forget *key*. Does nothing if it is not tracked."""
        with self._lock:
            self._access_times.pop(key, None)

    def remove_if_unchanged(self, key: str, accessed_at: float) -> bool:
        """Forget *key* only if its last access is still *accessed_at*.

        Returns:
            True if the key was removed, False if it was touched again since
            (or is no longer tracked).
        """
        with self._lock:
            if self._access_times.get(key) != accessed_at:
                return False
            del self._access_times[key]
            return True

    def last_access(self, key: str) -> float | None:
        with self._lock:
            return self._access_times.get(key)

    def size(self) -> int:
        with self._lock:
            return len(self._access_times)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._access_times
