"""
Per-event mutual exclusion.

Every capacity or waiting-list mutation for an event runs while holding that
event's lock, so two requests never read the same free-seat count or assign
the same priority. Locks for different events are independent. Idle locks are
dropped automatically (the registry only holds weak references).
"""
import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator


class EventLockRegistry:
    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, event_id) -> asyncio.Lock:
        key = str(event_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def acquire(self, event_id) -> AsyncIterator[None]:
        lock = self.lock_for(event_id)
        async with lock:
            yield


# Shared by request handlers and the promotion sweeper
event_locks = EventLockRegistry()
