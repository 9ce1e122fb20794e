"""
SQLAlchemy row schemas for persisted player state.

Rules:
- Schema only, no business logic
- Inherit from `Base` (and `TimestampMixin` for mutable rows)
- Derived values (levels, ranks) are never stored
"""

from voidcore.database.models.economy import BankTransactionRow, StakingAccountRow
from voidcore.database.models.progression import PlayerSkillRow

__all__ = [
    "PlayerSkillRow",
    "StakingAccountRow",
    "BankTransactionRow",
]
