"""Simple in-memory TTL cache. No Redis needed for this scale.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
data may be fetched twice (once per worker). Within one worker there is no
locking either: two concurrent misses on the same key both fetch and the
last write wins.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable

DEFAULT_TTL_SECONDS = 300


@dataclass
class CacheEntry:
    value: Any
    timestamp: float


class TTLCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        max_entries: int | None = None,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp < self.ttl_seconds

    def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._is_fresh(entry, self._clock()):
            return entry.value
        del self._store[key]
        return None

    def set(self, key: str, value: Any) -> None:
        if self.max_entries is not None and key not in self._store:
            self._make_room()
        self._store[key] = CacheEntry(value=value, timestamp=self._clock())

    def clear(self) -> None:
        self._store.clear()

    def _make_room(self) -> None:
        if len(self._store) < self.max_entries:
            return
        now = self._clock()
        for key in [k for k, e in self._store.items() if not self._is_fresh(e, now)]:
            del self._store[key]
        while len(self._store) >= self.max_entries:
            oldest = min(self._store, key=lambda k: self._store[k].timestamp)
            del self._store[oldest]
