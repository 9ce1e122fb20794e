"""
Domain models package for the VOID economy core.

Purpose
-------
Pure economy and progression rules. Nothing in this package performs I/O,
reads the clock or logs; services in ``voidcore.modules`` orchestrate these
models around storage, locking and events.
"""

from .base import (
    Amount,
    to_amount,
    validate_int,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
)
from .fees import DEFAULT_FEE_SPLIT, FeeSplit, distribute
from .level_curve import (
    LevelProgress,
    level_from_xp,
    level_from_xp_scan,
    progress,
    xp_for_level,
)
from .ranking import (
    KNOWN_CATEGORIES,
    RankingEntry,
    RankingService,
    RankSnapshot,
    validate_category,
)
from .skill import (
    CRAFTING_SKILL,
    SkillSheet,
    SkillState,
    SkillUpdate,
    XpAward,
    XpEventType,
    XpTrack,
    add_xp,
    xp_award_for_event,
)
from .staking import StakingAccount, start_of_day
from .transaction import BankTransaction, TransactionType, describe

__all__ = [
    # Validators
    "Amount",
    "to_amount",
    "validate_int",
    "validate_non_negative",
    "validate_not_empty",
    "validate_positive",
    # Level curve
    "LevelProgress",
    "level_from_xp",
    "level_from_xp_scan",
    "progress",
    "xp_for_level",
    # Skills
    "CRAFTING_SKILL",
    "SkillSheet",
    "SkillState",
    "SkillUpdate",
    "XpAward",
    "XpEventType",
    "XpTrack",
    "add_xp",
    "xp_award_for_event",
    # Staking
    "StakingAccount",
    "start_of_day",
    # Bank history
    "BankTransaction",
    "TransactionType",
    "describe",
    # Fees
    "DEFAULT_FEE_SPLIT",
    "FeeSplit",
    "distribute",
    # Rankings
    "KNOWN_CATEGORIES",
    "RankingEntry",
    "RankingService",
    "RankSnapshot",
    "validate_category",
]
