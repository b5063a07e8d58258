"""Session Locks — one asyncio.Lock per reframing session, dropped when idle.

Invariants:
    - At most one holder per session id at a time
    - Registry entries live only while a holder or waiter exists (no unbounded growth)
    - Different session ids never contend

Design Decisions:
    - In-process locks only (ADR: single uvicorn worker, same trade-off as the
      module-level state it replaces); multi-worker deployments need a DB row lock
    - Reference count instead of WeakValueDictionary: release order is explicit and
      testable via active_count
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID


class SessionLockRegistry:
    def __init__(self):
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._refs: dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, session_id: UUID) -> AsyncIterator[None]:
        """Serialize work on session_id for the duration of the block."""
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._refs[session_id] = self._refs.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._refs[session_id] -= 1
            if self._refs[session_id] == 0:
                del self._refs[session_id]
                del self._locks[session_id]

    @property
    def active_count(self) -> int:
        return len(self._locks)


session_locks = SessionLockRegistry()
