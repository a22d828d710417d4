# Path: core/search/cache.py
# Purpose: Bounded time-to-live cache for search outcomes.
# Layer: core/search.
# Details: Entries are keyed by a deterministic JSON serialization; evicting any entry never affects correctness.

from __future__ import annotations

import json
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Generic, Optional, Tuple, TypeVar

V = TypeVar("V")


def make_cache_key(**parts: Any) -> str:
    """Serialize keyword parts into a stable cache key."""

    return json.dumps(parts, sort_keys=True, default=str, separators=(",", ":"))


class TTLCache(Generic[V]):
    """Thread-safe LRU-bounded cache whose entries expire after ``ttl_seconds``."""

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, V]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: V) -> None:
        if self.ttl_seconds <= 0 or self.max_entries <= 0:
            return
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
