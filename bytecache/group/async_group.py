"""
Trio front end for a Group that coalesces concurrent misses on the same key.
"""

import logging

import trio

from bytecache.api.errors import LoaderError
from bytecache.cache.byteview import ByteView
from bytecache.group.group import Group
from bytecache.group.utils import InflightRequestCoalescer

logger = logging.getLogger(__name__)


class AsyncGroup:
    """
    Wraps a Group for trio tasks.

    Cache reads are quick and run inline. On a miss only one task per key (the
    leader) calls the loader, in a worker thread; every other task asking for
    that key while the load is running waits for the leader and gets the same
    value or the same exception. Failures are not remembered: the next miss
    loads again.
    """

    def __init__(self, group: Group) -> None:
        self.group = group
        self._coalescer: InflightRequestCoalescer[str, ByteView] = InflightRequestCoalescer()

    @property
    def name(self) -> str:
        return self.group.name

    async def get(self, key: str) -> ByteView:
        if key == "":
            return ByteView()
        self.group.record("gets")

        value = self.group.lookup_cache(key)
        if value is not None:
            return value

        flight, leader = await self._coalescer.join_or_lead(key)
        if not leader:
            logger.debug("[%s] waiting on in-flight load of %r", self.name, key)
            return await flight.wait()

        try:
            # a load may have finished between the cache check and becoming leader
            value = self.group.lookup_cache(key)
            if value is None:
                value = await trio.to_thread.run_sync(self.group.load, key)
            flight.resolve(value)
            return value
        except Exception as e:
            flight.fail(e)
            raise
        finally:
            if flight.value is None and flight.error is None:
                flight.fail(LoaderError("load was cancelled", key=key, group=self.name))
            with trio.CancelScope(shield=True):
                await self._coalescer.notify_done(key)
