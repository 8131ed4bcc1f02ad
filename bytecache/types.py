from typing import Callable, Protocol, runtime_checkable


class Value(Protocol):
    """Anything the LRU can hold: it only needs to report its size in bytes."""

    def __len__(self) -> int: ...


@runtime_checkable
class Getter(Protocol):
    """Loads the source bytes for a key on a cache miss. Raises on failure."""

    def get(self, key: str) -> bytes: ...


class GetterFunc:
    """Lets a plain function ``fn(key) -> bytes`` be used where a Getter is expected."""

    def __init__(self, fn: Callable[[str], bytes]) -> None:
        self._fn = fn

    def get(self, key: str) -> bytes:
        return self._fn(key)

    def __repr__(self) -> str:
        return f"GetterFunc({self._fn!r})"


OnEvicted = Callable[[str, Value], None]
"Called with (key, value) each time an entry is pushed out of the LRU"
