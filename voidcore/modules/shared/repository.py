"""
Storage collaborator contracts and in-memory implementations.

Purpose
-------
Services never talk to a database directly. They load and save immutable
domain state through a `StateRepository` and read bank history through a
`TransactionLog`. An `AccountRepository` saves a staking account together
with the history line of the operation that produced it, so a balance change
is never stored without its record. Production wires the SQLAlchemy implementations from
``voidcore.modules.progression.repository`` and
``voidcore.modules.bank.repository``; tests and local runs use the in-memory
ones below.

Design Notes
------------
- States are frozen dataclasses, so the in-memory store can hold them
  without copying.
- Repositories do no locking; services hold the per-player lock around each
  load-modify-save cycle.
- Failures surface as `StorageError`.

Usage
-----
    repo: StateRepository[StakingAccount] = InMemoryRepository()
    await repo.save("p1", StakingAccount(liquid_balance=100))
    account = await repo.load("p1")
"""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Deque, Dict, Generic, Iterator, List, Optional, Protocol, TypeVar

from voidcore.domain.models.staking import StakingAccount
from voidcore.domain.models.transaction import BankTransaction

T = TypeVar("T")

DEFAULT_HISTORY_LIMIT = 1000


class StateRepository(Protocol[T]):
    """Load/save one immutable state object per player."""

    async def load(self, player_id: str) -> Optional[T]:
        """Stored state, or None if the player has none yet."""
        ...

    async def save(self, player_id: str, state: T) -> None:
        ...


class AccountRepository(Protocol):
    """Staking account storage; ``save`` writes the account and its history line atomically."""

    async def load(self, player_id: str) -> Optional[StakingAccount]:
        ...

    async def save(
        self,
        player_id: str,
        state: StakingAccount,
        transaction: Optional[BankTransaction] = None,
    ) -> None:
        ...


class TransactionLog(Protocol):
    """Append-only per-player bank history."""

    async def append(self, transaction: BankTransaction) -> None:
        ...

    async def recent(self, player_id: str, limit: int) -> List[BankTransaction]:
        """Newest first, at most ``limit`` entries."""
        ...


class InMemoryRepository(Generic[T]):
    """Dict-backed `StateRepository`."""

    def __init__(self) -> None:
        self._states: Dict[str, T] = {}

    async def load(self, player_id: str) -> Optional[T]:
        return self._states.get(player_id)

    async def save(self, player_id: str, state: T) -> None:
        self._states[player_id] = state

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._states))


class InMemoryTransactionLog:
    """
    Bounded in-memory `TransactionLog`.

    Keeps the newest ``max_per_player`` entries for each player.
    """

    def __init__(self, max_per_player: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._max = max_per_player
        self._entries: Dict[str, Deque[BankTransaction]] = defaultdict(
            lambda: deque(maxlen=self._max)
        )

    async def append(self, transaction: BankTransaction) -> None:
        self._entries[transaction.player_id].append(transaction)

    async def recent(self, player_id: str, limit: int) -> List[BankTransaction]:
        entries = self._entries.get(player_id)
        if not entries or limit <= 0:
            return []
        return list(reversed(entries))[:limit]


class InMemoryAccountRepository(InMemoryRepository[StakingAccount]):
    """`AccountRepository` that records history lines into an in-memory log."""

    def __init__(self, history: InMemoryTransactionLog) -> None:
        super().__init__()
        self._history = history

    async def save(
        self,
        player_id: str,
        state: StakingAccount,
        transaction: Optional[BankTransaction] = None,
    ) -> None:
        await super().save(player_id, state)
        if transaction is not None:
            await self._history.append(transaction)
