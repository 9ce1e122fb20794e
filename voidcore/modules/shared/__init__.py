"""
Shared service infrastructure: base service, storage contracts, player locks.
"""

from voidcore.modules.shared.base_service import BaseService
from voidcore.modules.shared.locks import PlayerLockRegistry
from voidcore.modules.shared.repository import (
    AccountRepository,
    InMemoryAccountRepository,
    InMemoryRepository,
    InMemoryTransactionLog,
    StateRepository,
    TransactionLog,
)

__all__ = [
    "BaseService",
    "PlayerLockRegistry",
    "StateRepository",
    "AccountRepository",
    "TransactionLog",
    "InMemoryRepository",
    "InMemoryAccountRepository",
    "InMemoryTransactionLog",
]
