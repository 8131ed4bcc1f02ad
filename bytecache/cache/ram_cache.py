import threading
from dataclasses import dataclass

from bytecache.cache.byteview import ByteView
from bytecache.cache.lru import LruCache
from bytecache.types import OnEvicted, Value


@dataclass(frozen=True)
class RamCacheStats:
    items: int
    used_bytes: int
    max_bytes: int
    "0 means unbounded"
    evictions: int


class RamCache:
    """
    Thread-safe wrapper around a single LruCache.

    Concurrency:
      - every operation runs under one threading.Lock, so a get never sees a
        half-applied add
      - the LruCache is only built on the first operation, under that same
        lock; groups that are declared but never used allocate nothing
      - on_evicted runs with the lock held and must not call back into this cache
    """

    def __init__(self, *, cache_bytes: int, on_evicted: OnEvicted | None = None) -> None:
        if cache_bytes < 0:
            raise ValueError("cache_bytes must be >= 0")
        self._cache_bytes = cache_bytes
        self._on_evicted = on_evicted
        self._lock = threading.Lock()
        self._lru: LruCache[ByteView] | None = None
        self._evictions = 0

    @property
    def initialized(self) -> bool:
        return self._lru is not None

    def _ensure_lru(self) -> LruCache[ByteView]:
        # caller holds self._lock
        if self._lru is None:
            self._lru = LruCache(self._cache_bytes, on_evicted=self._record_eviction)
        return self._lru

    def _record_eviction(self, key: str, value: Value) -> None:
        self._evictions += 1
        if self._on_evicted is not None:
            self._on_evicted(key, value)

    def get(self, key: str) -> ByteView | None:
        with self._lock:
            return self._ensure_lru().get(key)

    def add(self, key: str, value: ByteView) -> None:
        with self._lock:
            self._ensure_lru().add(key, value)

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._ensure_lru().remove(key)

    def clear(self) -> None:
        with self._lock:
            self._ensure_lru().clear()
            self._evictions = 0

    def stats(self) -> RamCacheStats:
        with self._lock:
            lru = self._lru
            if lru is None:
                return RamCacheStats(items=0, used_bytes=0, max_bytes=self._cache_bytes, evictions=0)
            return RamCacheStats(
                items=len(lru),
                used_bytes=lru.used_bytes,
                max_bytes=lru.max_bytes,
                evictions=self._evictions,
            )
