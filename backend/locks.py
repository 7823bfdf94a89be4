# locks.py — In-process mutual exclusion for position reindexes
import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import Iterable


class KeyedLocks:
    """Registry of asyncio locks keyed by row id.

    Several keys are always acquired in ascending order so two moves in
    opposite directions cannot deadlock. A lock lives only while someone
    holds a reference to it.

    These locks serialise writers inside one worker process. Writers in other
    processes are caught by the board version counter at commit time.
    """

    def __init__(self, name: str):
        self.name = name
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, key: int) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, keys: Iterable[int]):
        locks = [self._lock_for(key) for key in sorted(set(keys))]
        acquired = []
        try:
            for lock in locks:
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def is_locked(self, key: int) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()


# Card sequence of a board (moves, creates, deletes)
board_locks = KeyedLocks("board")
# Board sequence of a project (board create, update, reorder, delete). Taken before board locks.
project_locks = KeyedLocks("project")
