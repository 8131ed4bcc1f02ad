import trio
from typing import Generic, Tuple, TypeVar

_InflightKey = TypeVar("_InflightKey")
_Result = TypeVar("_Result")


class Flight(Generic[_Result]):
    """One in-progress load. The leader fills in the outcome, then sets done."""

    def __init__(self) -> None:
        self.done = trio.Event()
        self.value: _Result | None = None
        self.error: BaseException | None = None

    def resolve(self, value: _Result) -> None:
        self.value = value

    def fail(self, error: BaseException) -> None:
        self.error = error

    async def wait(self) -> _Result:
        await self.done.wait()
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class InflightRequestCoalescer(Generic[_InflightKey, _Result]):
    """
    Request coalescing helper.

    Tracks in-flight work keyed by an arbitrary key.
    - join_or_lead(key) returns (flight, is_leader)
    - notify_done(key) wakes followers and removes the key
    """

    def __init__(self) -> None:
        self._lock = trio.Lock()
        self._inflight: dict[_InflightKey, Flight[_Result]] = {}

    async def join_or_lead(self, key: _InflightKey) -> Tuple[Flight[_Result], bool]:
        """
        If no request is running for key, caller becomes leader and must perform the work.
        Followers should await the returned flight.
        """
        async with self._lock:
            leader = key not in self._inflight
            if leader:
                self._inflight[key] = Flight()
            return self._inflight[key], leader

    async def notify_done(self, key: _InflightKey) -> None:
        """Wake up any followers waiting on key and cleanup."""
        async with self._lock:
            flight = self._inflight.pop(key, None)
            if flight is not None:
                flight.done.set()

    def inflight(self) -> int:
        return len(self._inflight)
