"""
Bounded response cache with per-entry expiry
"""
import time
from collections import OrderedDict
from typing import Any, Callable, Optional


class TTLCache:
    """LRU-ordered map that drops entries older than ``ttl`` seconds.

    When full, the least recently used entry is evicted.
    """

    def __init__(self, max_entries: int, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self.ttl = ttl
        self.clock = clock
        self._entries: "OrderedDict[str, tuple[float, Any]]" = OrderedDict()

    def __len__(self) -> int:
        self.evict_expired()
        return len(self._entries)

    def get(self, key: str) -> Optional[Any]:
        item = self._entries.get(key)
        if item is None:
            return None
        stored_at, value = item
        if self.clock() - stored_at >= self.ttl:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        if key in self._entries:
            del self._entries[key]
        self._entries[key] = (self.clock(), value)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def evict_expired(self) -> int:
        now = self.clock()
        expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at >= self.ttl]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> int:
        size = len(self._entries)
        self._entries.clear()
        return size

    def keys(self, limit: int = 10) -> list[str]:
        self.evict_expired()
        return list(self._entries.keys())[:limit]
