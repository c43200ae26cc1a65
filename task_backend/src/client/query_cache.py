from __future__ import annotations

from threading import RLock
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

QueryKey = Tuple[Hashable, ...]


class QueryCache:
    """
    Cache of read results keyed by tuples such as ("tasks",) or ("tasks", task_id).

    invalidate(prefix) drops every key that starts with prefix, so invalidating
    ("tasks",) clears the collection and all single-task entries at once.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._entries: Dict[QueryKey, Any] = {}

    def __contains__(self, key: QueryKey) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: QueryKey, default: Optional[Any] = None) -> Any:
        with self._lock:
            return self._entries.get(key, default)

    def set(self, key: QueryKey, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def fetch(self, key: QueryKey, loader: Callable[[], Any]) -> Any:
        """Return the cached value for key, calling loader on a miss. Failures are not cached."""
        with self._lock:
            if key in self._entries:
                return self._entries[key]
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop every entry whose key starts with prefix; return how many were dropped."""
        n = len(prefix)
        with self._lock:
            stale = [k for k in self._entries if k[:n] == prefix]
            for k in stale:
                del self._entries[k]
            return len(stale)
