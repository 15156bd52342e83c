import time
from collections import OrderedDict
from typing import Any


class ResponseCache:
    """Bounded LRU cache whose entries expire after ``ttl_seconds``."""

    def __init__(self, max_entries: int, ttl_seconds: float):
        self._max_entries = max_entries
        self._ttl = ttl_seconds
        self._items: OrderedDict[str, tuple[float, Any]] = OrderedDict()

    def get(self, key: str) -> Any | None:
        item = self._items.get(key)
        if item is None:
            return None
        expires_at, value = item
        if expires_at <= time.monotonic():
            del self._items[key]
            return None
        self._items.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        self._items[key] = (time.monotonic() + self._ttl, value)
        self._items.move_to_end(key)
        while len(self._items) > self._max_entries:
            self._items.popitem(last=False)

    def __len__(self) -> int:
        return len(self._items)
