"""
Read-only view over a cached value.
The cache owns the payload; readers only ever get copies.
"""


def clone_bytes(b) -> bytes:
    """Returns an immutable copy of any bytes-like object."""
    return bytes(b)


class ByteView:
    """
    Immutable holder for a cached payload.

    The constructor takes a private copy, so a caller mutating the buffer it
    passed in (e.g. a bytearray) cannot change what the cache holds, nor the
    size the LRU accounted for it.
    """

    __slots__ = ("_b",)

    def __init__(self, payload=b"") -> None:
        if isinstance(payload, (str, int)):
            raise TypeError(f"ByteView needs a bytes-like payload, got {type(payload).__name__}")
        self._b = clone_bytes(payload)

    def __len__(self) -> int:
        return len(self._b)

    def length(self) -> int:
        return len(self._b)

    def byte_slice(self) -> bytearray:
        """A fresh mutable copy. Changing it never touches the cached value."""
        return bytearray(self._b)

    def as_string(self) -> str:
        return self._b.decode("utf-8", errors="replace")

    def __str__(self) -> str:
        return self.as_string()

    def __bytes__(self) -> bytes:
        return self._b

    def __eq__(self, other) -> bool:
        if isinstance(other, ByteView):
            return self._b == other._b
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._b)

    def __repr__(self) -> str:
        return f"ByteView({self._b!r})"
