import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from weakref import WeakValueDictionary


class UserLockRegistry:
    """
    One asyncio.Lock per user id, so that at most one order mutates a
    given portfolio at a time inside this process.

    Locks nobody holds or waits on are dropped automatically.
    """

    def __init__(self) -> None:
        self._locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()

    def get(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    @asynccontextmanager
    async def acquire(self, user_id: str) -> AsyncGenerator[None, None]:
        lock = self.get(user_id)
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)
