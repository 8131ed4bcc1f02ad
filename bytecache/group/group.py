"""
Named cache namespaces.
A Group binds a name, a loader and a RamCache; a GroupRegistry owns the groups.
"""

import logging
import threading
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Callable

from bytecache.api.errors import GroupConfigError, LoaderError
from bytecache.cache.byteview import ByteView
from bytecache.cache.ram_cache import RamCache, RamCacheStats
from bytecache.types import Getter, GetterFunc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupStats:
    name: str
    gets: int
    hits: int
    loads: int
    load_errors: int
    cache: RamCacheStats


def as_getter(getter: Getter | Callable[[str], bytes] | None) -> Getter:
    """Accepts a Getter or a bare function; None is a configuration error."""
    if getter is None:
        raise GroupConfigError("nil Getter")
    if isinstance(getter, Mapping):
        raise GroupConfigError(f"getter must be a loader, not a {type(getter).__name__}")
    if isinstance(getter, Getter):
        return getter
    if callable(getter):
        return GetterFunc(getter)
    raise GroupConfigError(f"getter must be callable or have a get() method, got {type(getter).__name__}")


class Group:
    """
    A cache namespace, e.g. "scores" or "courses".

    get() serves from the cache and falls back to the loader on a miss. The
    loader runs outside the cache lock, so two threads missing on the same
    key may both call it. Use AsyncGroup if loads must be coalesced.
    """

    def __init__(self, name: str, cache_bytes: int, getter: Getter | Callable[[str], bytes]) -> None:
        if not name:
            raise GroupConfigError("group name must not be empty")
        self.getter = as_getter(getter)
        self.name = name
        self.main_cache = RamCache(cache_bytes=cache_bytes)

        self._stats_lock = threading.Lock()
        self._counters = {"gets": 0, "hits": 0, "loads": 0, "load_errors": 0}

    def record(self, counter: str) -> None:
        with self._stats_lock:
            self._counters[counter] += 1

    def lookup_cache(self, key: str) -> ByteView | None:
        value = self.main_cache.get(key)
        if value is not None:
            self.record("hits")
        return value

    def get(self, key: str) -> ByteView:
        if key == "":
            return ByteView()
        self.record("gets")

        value = self.lookup_cache(key)
        if value is not None:
            logger.debug("[%s] hit %r", self.name, key)
            return value

        return self.load(key)

    def load(self, key: str) -> ByteView:
        # Always local: there are no peers to ask first.
        return self.get_locally(key)

    def get_locally(self, key: str) -> ByteView:
        self.record("loads")
        try:
            payload = self.getter.get(key)
        except Exception as e:
            self.record("load_errors")
            logger.warning("[%s] loader failed for %r: %s", self.name, key, e)
            raise
        if not isinstance(payload, (bytes, bytearray, memoryview)):
            self.record("load_errors")
            raise LoaderError(
                f"loader returned {type(payload).__name__}, expected bytes",
                key=key,
                group=self.name,
            )
        value = ByteView(payload)
        self.populate_cache(key, value)
        logger.debug("[%s] loaded %r (%d bytes)", self.name, key, len(value))
        return value

    def populate_cache(self, key: str, value: ByteView) -> None:
        self.main_cache.add(key, value)

    def stats(self) -> GroupStats:
        with self._stats_lock:
            counters = dict(self._counters)
        return GroupStats(
            name=self.name,
            **counters,
            cache=self.main_cache.stats(),
        )

    def __repr__(self) -> str:
        return f"Group(name={self.name!r}, getter={self.getter!r})"


class GroupRegistry:
    """Owns every Group created through it. Groups are never removed."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._groups: dict[str, Group] = {}

    def new_group(self, name: str, cache_bytes: int, getter: Getter | Callable[[str], bytes]) -> Group:
        group = Group(name, cache_bytes, getter)
        with self._lock:
            if name in self._groups:
                logger.warning("Replacing existing group %r", name)
            self._groups[name] = group
        return group

    def get_group(self, name: str) -> Group | None:
        with self._lock:
            return self._groups.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._groups)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._groups

    def __len__(self) -> int:
        with self._lock:
            return len(self._groups)
