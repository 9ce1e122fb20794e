"""
SQLAlchemy storage for staking accounts and bank history.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from voidcore.core.database.service import DatabaseService
from voidcore.core.exceptions import StorageError
from voidcore.core.logging.logger import get_logger
from voidcore.database.models.economy import BankTransactionRow, StakingAccountRow
from voidcore.domain.models.staking import StakingAccount
from voidcore.domain.models.transaction import BankTransaction, TransactionType

logger = get_logger(__name__)

_ACCOUNT_FIELDS = (
    "liquid_balance",
    "staked_balance",
    "apr",
    "accrued_interest",
    "total_interest_earned",
    "daily_limit",
    "withdrawn_today",
    "window_start",
)


def _to_row(transaction: BankTransaction) -> BankTransactionRow:
    return BankTransactionRow(
        id=transaction.id,
        player_id=transaction.player_id,
        type=transaction.type.value,
        amount=transaction.amount,
        description=transaction.description,
        timestamp=transaction.timestamp,
    )


class SqlAlchemyStakingRepository:
    """`AccountRepository` backed by ``staking_accounts`` and ``bank_transactions``."""

    def __init__(self, database: DatabaseService) -> None:
        self._db = database

    async def load(self, player_id: str) -> Optional[StakingAccount]:
        try:
            async with self._db.get_session() as session:
                row = await session.get(StakingAccountRow, player_id)
        except SQLAlchemyError as exc:
            raise StorageError("load", player_id, exc) from exc

        logger.debug(
            "Repository.load: StakingAccountRow",
            extra={"player_id": player_id, "found": row is not None},
        )
        if row is None:
            return None
        return StakingAccount(**{name: getattr(row, name) for name in _ACCOUNT_FIELDS})

    async def save(
        self,
        player_id: str,
        state: StakingAccount,
        transaction: Optional[BankTransaction] = None,
    ) -> None:
        """Upsert the account and, if given, its history line in one transaction."""
        try:
            async with self._db.get_transaction() as session:
                row = await session.get(StakingAccountRow, player_id, with_for_update=True)
                if row is None:
                    row = StakingAccountRow(player_id=player_id)
                    session.add(row)
                for name in _ACCOUNT_FIELDS:
                    setattr(row, name, getattr(state, name))
                if transaction is not None:
                    session.add(_to_row(transaction))
        except SQLAlchemyError as exc:
            raise StorageError("save", player_id, exc) from exc


class SqlAlchemyTransactionLog:
    """`TransactionLog` backed by the append-only ``bank_transactions`` table."""

    def __init__(self, database: DatabaseService) -> None:
        self._db = database

    async def append(self, transaction: BankTransaction) -> None:
        try:
            async with self._db.get_transaction() as session:
                session.add(_to_row(transaction))
        except SQLAlchemyError as exc:
            raise StorageError("append", transaction.player_id, exc) from exc

    async def recent(self, player_id: str, limit: int) -> List[BankTransaction]:
        if limit <= 0:
            return []
        try:
            async with self._db.get_session() as session:
                result = await session.execute(
                    select(BankTransactionRow)
                    .where(BankTransactionRow.player_id == player_id)
                    .order_by(BankTransactionRow.seq.desc())
                    .limit(limit)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise StorageError("load", player_id, exc) from exc

        return [
            BankTransaction(
                id=row.id,
                player_id=row.player_id,
                type=TransactionType(row.type),
                amount=row.amount,
                description=row.description,
                timestamp=row.timestamp,
            )
            for row in rows
        ]
