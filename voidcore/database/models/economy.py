"""
Bank schema: staking accounts and the immutable transaction log.
Schema only.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from voidcore.core.database.base import Base, DecimalString, IsoDateTime, TimestampMixin


class StakingAccountRow(Base, TimestampMixin):
    """
    Persisted `StakingAccount`.

    Schema-only:
    - liquid / staked balances
    - apr, accrued and lifetime interest
    - daily limit and the current withdrawal window
    """

    __tablename__ = "staking_accounts"

    player_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    liquid_balance: Mapped[Decimal] = mapped_column(DecimalString, nullable=False, default=Decimal(0))
    staked_balance: Mapped[Decimal] = mapped_column(DecimalString, nullable=False, default=Decimal(0))
    apr: Mapped[Decimal] = mapped_column(DecimalString, nullable=False, default=Decimal(0))
    accrued_interest: Mapped[Decimal] = mapped_column(DecimalString, nullable=False, default=Decimal(0))
    total_interest_earned: Mapped[Decimal] = mapped_column(
        DecimalString, nullable=False, default=Decimal(0)
    )

    daily_limit: Mapped[Decimal] = mapped_column(DecimalString, nullable=False, default=Decimal(0))
    withdrawn_today: Mapped[Decimal] = mapped_column(DecimalString, nullable=False, default=Decimal(0))
    window_start: Mapped[Optional[datetime]] = mapped_column(IsoDateTime, nullable=True)


class BankTransactionRow(Base):
    """Append-only bank history line (no updates, only inserts)."""

    __tablename__ = "bank_transactions"
    __table_args__ = (Index("ix_bank_transactions_player_seq", "player_id", "seq"),)

    seq: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    player_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DecimalString, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(IsoDateTime, nullable=False)
