"""
Byte-budgeted LRU cache.
Not safe for concurrent use: RamCache serializes access to it.
"""

import logging
from collections import OrderedDict
from typing import Generic, Iterator, TypeVar

from bytecache.types import OnEvicted, Value

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=Value)


def entry_size(key: str, value: Value) -> int:
    """Bytes charged for one entry: the UTF-8 encoded key plus the value."""
    return len(key.encode("utf-8")) + len(value)


class LruCache(Generic[V]):
    """
    LRU cache bounded by bytes, not entries.

    Each entry costs the UTF-8 length of its key plus len(value). The
    OrderedDict is both the key index and the recency list: first item is
    least recently used, last item is most recently used.

    max_bytes == 0 disables eviction.
    """

    def __init__(self, max_bytes: int = 0, on_evicted: OnEvicted | None = None) -> None:
        if max_bytes < 0:
            raise ValueError("max_bytes must be >= 0")
        self._max_bytes = max_bytes
        self._used_bytes = 0
        self._lru: OrderedDict[str, V] = OrderedDict()
        self.on_evicted = on_evicted

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    @property
    def used_bytes(self) -> int:
        return self._used_bytes

    def get(self, key: str) -> V | None:
        """Returns the value and marks it as recently used, or None on a miss."""
        value = self._lru.get(key)
        if value is None:
            return None
        self._lru.move_to_end(key, last=True)
        return value

    def add(self, key: str, value: V) -> None:
        """Inserts or updates key, then evicts LRU entries until back under budget."""
        old = self._lru.get(key)
        if old is not None:
            # update counts as a use
            self._lru.move_to_end(key, last=True)
            self._used_bytes += len(value) - len(old)
            self._lru[key] = value
        else:
            self._lru[key] = value
            self._used_bytes += entry_size(key, value)

        # loop: one large insert may need several small evictions
        while self._max_bytes != 0 and self._used_bytes > self._max_bytes:
            self.remove_oldest()

    def remove_oldest(self) -> None:
        if not self._lru:
            return
        key, value = self._lru.popitem(last=False)
        self._used_bytes -= entry_size(key, value)
        logger.debug("Evicted %r (%d bytes in use)", key, self._used_bytes)
        if self.on_evicted is not None:
            self.on_evicted(key, value)

    def remove(self, key: str) -> bool:
        """Drops key without calling on_evicted. Returns whether it was present."""
        value = self._lru.pop(key, None)
        if value is None:
            return False
        self._used_bytes -= entry_size(key, value)
        return True

    def clear(self) -> None:
        self._lru.clear()
        self._used_bytes = 0

    def keys(self) -> list[str]:
        """Snapshot of keys, least recently used first."""
        return list(self._lru.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._lru

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._lru)
