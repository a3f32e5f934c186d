"""In-memory LRU cache with TTL expiration.

Process-level cache for raw Overpass responses, so a user stepping past the
end of a one-venue list or re-searching from the same spot does not hit the
public Overpass server again within a few minutes.
"""

import time
from collections import OrderedDict
from typing import Any


class LRUCache:
    """TTL-aware LRU cache for JSON-decoded responses."""

    def __init__(self, max_size: int = 100, ttl_seconds: int = 300) -> None:
        self._cache: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._max_size = max_size
        self._ttl = ttl_seconds

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, key: str) -> Any | None:
        if key not in self._cache:
            return None
        ts, value = self._cache[key]
        if time.monotonic() - ts > self._ttl:
            del self._cache[key]
            return None
        self._cache.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        if key in self._cache:
            self._cache.move_to_end(key)
        self._cache[key] = (time.monotonic(), value)
        if len(self._cache) > self._max_size:
            self._cache.popitem(last=False)

    def clear(self) -> None:
        self._cache.clear()
