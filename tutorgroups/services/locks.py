"""Per-aggregate single-writer locks."""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

LockKey = tuple[str, str]

# Acquisition order across kinds; ids are sorted within a kind
_RANK = {"teacher": 0, "group": 1, "enrollment": 2}


def teacher_key(teacher_id: str) -> LockKey:
    return ("teacher", teacher_id)


def group_key(group_id: str) -> LockKey:
    return ("group", group_id)


def enrollment_key(enrollment_id: str) -> LockKey:
    return ("enrollment", enrollment_id)


class AggregateLocks:
    """At most one in-flight mutation per aggregate identity.

    ``hold`` acquires every key in teacher -> group -> enrollment order. A
    caller that nests holds must only go down that order, never up. Locks
    nobody waits on are dropped, so the table stays as small as the number
    of in-flight operations.
    """

    def __init__(self):
        self._locks: dict[LockKey, asyncio.Lock] = {}
        self._users: dict[LockKey, int] = {}

    def _checkout(self, key: LockKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        return lock

    def _checkin(self, key: LockKey) -> None:
        self._users[key] -= 1
        if not self._users[key]:
            del self._users[key]
            del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, *keys: LockKey) -> AsyncIterator[None]:
        ordered = sorted(set(keys), key=lambda k: (_RANK[k[0]], k[1]))
        checked_out: list[LockKey] = []
        held: list[LockKey] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                checked_out.append(key)
                await lock.acquire()
                held.append(key)
            yield
        finally:
            for key in reversed(held):
                self._locks[key].release()
            for key in checked_out:
                self._checkin(key)
