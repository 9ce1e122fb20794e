"""
Skill progression domain model.

Purpose
-------
Track XP for any named skill (crafting, the explorer/builder/operator
tracks, future skills) on top of the shared level curve.

Responsibilities
----------------
- Hold the single stored quantity, XP, in an immutable `SkillState`
- Derive level, XP to next level and percent from that XP on demand
- Add XP without ever decreasing it
- Map gameplay events to XP awards on the three progression tracks

Non-Responsibilities
--------------------
- Persistence (handled by repositories)
- Level-up side effects (callers compare levels before and after)

Usage Example
-------------
>>> update = add_xp(SkillState(xp=8000), 450)
>>> update.state.xp
8450
>>> update.progress.level
9
>>> update.leveled_up
False
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from voidcore.domain.exceptions import InvalidArgumentError
from voidcore.domain.models.base import validate_int, validate_non_negative
from voidcore.domain.models.level_curve import LevelProgress, level_from_xp, progress

CRAFTING_SKILL = "crafting"


class XpTrack(str, Enum):
    """Progression tracks that together make up a player's total XP."""

    EXPLORER = "explorer"
    BUILDER = "builder"
    OPERATOR = "operator"


# ============================================================================
# VALUE OBJECTS
# ============================================================================


@dataclass(frozen=True)
class SkillState:
    """
    Stored state of one skill.

    Attributes
    ----------
    xp : int
        Total experience points, never negative
    """

    xp: int = 0

    def __post_init__(self) -> None:
        validate_int(self.xp, "xp")
        validate_non_negative(self.xp, "xp")

    @property
    def level(self) -> int:
        return level_from_xp(self.xp)

    @property
    def progress(self) -> LevelProgress:
        return progress(self.xp)


@dataclass(frozen=True)
class SkillUpdate:
    """
    Result of adding XP to a skill.

    Attributes
    ----------
    state : SkillState
        New skill state
    progress : LevelProgress
        Progress snapshot recomputed from the new XP
    previous_level : int
        Level before the XP was added
    """

    state: SkillState
    progress: LevelProgress
    previous_level: int

    @property
    def levels_gained(self) -> int:
        return self.progress.level - self.previous_level

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0


def add_xp(state: SkillState, amount: int) -> SkillUpdate:
    """
    Return a new skill state with ``amount`` XP added.

    Parameters
    ----------
    state : SkillState
        Current skill state (left untouched)
    amount : int
        XP to add, zero or greater

    Returns
    -------
    SkillUpdate
        New state plus recomputed progress

    Raises
    ------
    InvalidArgumentError
        If amount is negative or not an integer
    """
    validate_int(amount, "amount")
    if amount < 0:
        raise InvalidArgumentError("amount", f"xp amount must be non-negative, got {amount}")

    new_state = SkillState(xp=state.xp + amount)
    return SkillUpdate(
        state=new_state,
        progress=new_state.progress,
        previous_level=state.level,
    )


# ============================================================================
# SKILL SHEET (ALL SKILLS OF ONE PLAYER)
# ============================================================================


@dataclass(frozen=True)
class SkillSheet:
    """
    Every skill a player has touched, keyed by skill name.

    Skills absent from the sheet are at zero XP. The player's overall level
    is derived from the sum of the three track skills.
    """

    xp_by_skill: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name, xp in self.xp_by_skill.items():
            validate_int(xp, f"xp[{name}]")
            validate_non_negative(xp, f"xp[{name}]")
        object.__setattr__(self, "xp_by_skill", MappingProxyType(dict(self.xp_by_skill)))

    def get(self, skill: str) -> SkillState:
        return SkillState(xp=self.xp_by_skill.get(skill, 0))

    def with_skill(self, skill: str, state: SkillState) -> SkillSheet:
        """Return a copy of the sheet with ``skill`` replaced."""
        updated = dict(self.xp_by_skill)
        updated[skill] = state.xp
        return SkillSheet(xp_by_skill=updated)

    @property
    def total_xp(self) -> int:
        return sum(self.xp_by_skill.get(track.value, 0) for track in XpTrack)

    @property
    def level(self) -> int:
        return level_from_xp(self.total_xp)

    def to_dict(self) -> Dict[str, Any]:
        """External shape of the player XP endpoint."""
        return {
            "totalXp": self.total_xp,
            "explorerXp": self.xp_by_skill.get(XpTrack.EXPLORER.value, 0),
            "builderXp": self.xp_by_skill.get(XpTrack.BUILDER.value, 0),
            "operatorXp": self.xp_by_skill.get(XpTrack.OPERATOR.value, 0),
            "level": self.level,
        }


# ============================================================================
# XP EVENTS
# ============================================================================


class XpEventType(str, Enum):
    """Gameplay events that award track XP."""

    ZONE_FIRST_VISIT = "ZONE_FIRST_VISIT"
    ZONE_DAILY_VISIT = "ZONE_DAILY_VISIT"
    DISTRICT_LOOP = "DISTRICT_LOOP"
    MOVEMENT_CHUNK = "MOVEMENT_CHUNK"
    PROXIMITY_CHAT_MESSAGE = "PROXIMITY_CHAT_MESSAGE"
    SKU_MINT = "SKU_MINT"
    SKU_SALE = "SKU_SALE"
    LAND_REVENUE = "LAND_REVENUE"
    VOID_SWAP = "VOID_SWAP"
    XVOID_STAKE = "XVOID_STAKE"
    PSX_PLEDGE = "PSX_PLEDGE"
    GOV_VOTE = "GOV_VOTE"
    GOV_PROPOSAL_PASSED = "GOV_PROPOSAL_PASSED"


@dataclass(frozen=True)
class XpAward:
    """XP granted to one track by one event."""

    track: XpTrack
    amount: int


# VOID_SWAP is value-scaled and handled separately.
_FIXED_EVENT_AWARDS: Dict[XpEventType, XpAward] = {
    XpEventType.ZONE_FIRST_VISIT: XpAward(XpTrack.EXPLORER, 50),
    XpEventType.ZONE_DAILY_VISIT: XpAward(XpTrack.EXPLORER, 10),
    XpEventType.DISTRICT_LOOP: XpAward(XpTrack.EXPLORER, 30),
    XpEventType.MOVEMENT_CHUNK: XpAward(XpTrack.EXPLORER, 5),
    XpEventType.PROXIMITY_CHAT_MESSAGE: XpAward(XpTrack.EXPLORER, 30),
    XpEventType.SKU_MINT: XpAward(XpTrack.BUILDER, 100),
    XpEventType.SKU_SALE: XpAward(XpTrack.BUILDER, 20),
    XpEventType.LAND_REVENUE: XpAward(XpTrack.BUILDER, 25),
    XpEventType.XVOID_STAKE: XpAward(XpTrack.OPERATOR, 50),
    XpEventType.PSX_PLEDGE: XpAward(XpTrack.OPERATOR, 30),
    XpEventType.GOV_VOTE: XpAward(XpTrack.OPERATOR, 25),
    XpEventType.GOV_PROPOSAL_PASSED: XpAward(XpTrack.OPERATOR, 100),
}

VOID_SWAP_XP_DIVISOR = 100


def xp_award_for_event(event: XpEventType, value: Optional[int] = None) -> XpAward:
    """
    XP award for a gameplay event.

    Args:
        event: Event type (enum member or its string value)
        value: Event value; only VOID_SWAP uses it (1 XP per 100 VOID swapped)

    Raises:
        InvalidArgumentError: Unknown event or negative swap value

    Example:
        >>> xp_award_for_event(XpEventType.SKU_MINT)
        XpAward(track=<XpTrack.BUILDER: 'builder'>, amount=100)
        >>> xp_award_for_event(XpEventType.VOID_SWAP, 1250).amount
        12
    """
    try:
        event = XpEventType(event)
    except ValueError:
        raise InvalidArgumentError("event", f"unknown xp event {event!r}") from None

    if event is XpEventType.VOID_SWAP:
        swapped = validate_int(value if value is not None else 0, "value")
        validate_non_negative(swapped, "value")
        return XpAward(XpTrack.OPERATOR, swapped // VOID_SWAP_XP_DIVISOR)

    return _FIXED_EVENT_AWARDS[event]
