"""
Per-player async locks.

Every service mutation is a load-modify-save cycle against the repository.
Holding the player's lock for the whole cycle makes operations on one player
linearizable while different players proceed in parallel.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class PlayerLockRegistry:
    """
    Lazily created `asyncio.Lock` per player id.

    Locks are never evicted; the registry grows with the number of distinct
    players seen by this process.

    Usage
    -----
        async with locks.hold(player_id):
            state = await repo.load(player_id)
            await repo.save(player_id, change(state))
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, player_id: str) -> asyncio.Lock:
        lock = self._locks.get(player_id)
        if lock is None:
            lock = self._locks[player_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, player_id: str) -> AsyncIterator[None]:
        async with self.get(player_id):
            yield

    def __len__(self) -> int:
        return len(self._locks)
