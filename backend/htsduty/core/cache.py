"""Small in-memory LRU cache for resolved searches and code lookups.

No TTL: entries leave only under capacity pressure or when a newer
write replaces them. A read moves the entry to the most-recently-used
end. Guarded by a lock so threaded hosts can share one instance.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any

logger = logging.getLogger(__name__)


class CacheEntry:
    __slots__ = ("key", "inserted_at", "value")

    def __init__(self, key: str, value: Any):
        self.key = key
        self.inserted_at = time.time()
        self.value = value


class LRUCache:
    """Fixed-capacity least-recently-used cache."""

    def __init__(self, max_entries: int = 120):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        entry = self.get_entry(key)
        return entry.value if entry else None

    def get_entry(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return entry

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full ({self.max_entries}); evicted {evicted}")
            self._entries[key] = CacheEntry(key, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
