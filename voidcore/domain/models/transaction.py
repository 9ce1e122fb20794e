"""
Bank transaction history entries.

Amounts are signed from the player's liquid-balance point of view: a
withdrawal is negative, a deposit or interest claim positive. Stake and
unstake carry the moved amount with the sign of the liquid change.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    STAKE = "stake"
    UNSTAKE = "unstake"
    INTEREST = "interest"


@dataclass(frozen=True)
class BankTransaction:
    """One immutable line of a player's bank history."""

    player_id: str
    type: TransactionType
    amount: Decimal
    description: str
    timestamp: datetime
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "description": self.description,
            "amount": float(self.amount),
            "timestamp": self.timestamp.isoformat(),
        }


def describe(tx_type: TransactionType, amount: Decimal) -> str:
    """Human-readable description shown in the bank history."""
    shown = f"{abs(amount):,.2f}".rstrip("0").rstrip(".")
    return {
        TransactionType.DEPOSIT: f"Deposited {shown} VOID",
        TransactionType.WITHDRAW: f"Withdrew {shown} VOID",
        TransactionType.STAKE: f"Staked {shown} VOID",
        TransactionType.UNSTAKE: f"Unstaked {shown} VOID",
        TransactionType.INTEREST: f"Claimed {shown} VOID interest",
    }[tx_type]
