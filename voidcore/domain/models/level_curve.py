"""
Level curve for VOID experience points.

Purpose
-------
Pure calculation functions mapping experience to level and back. The curve
is quadratic: reaching level ``L`` takes ``100 * L**2`` total XP, so level 0
starts at 0 XP, level 1 at 100, level 10 at 10 000.

Design Notes
------------
- Pure functions only: no side effects, no config, no clock.
- `level_from_xp` uses the integer closed form ``isqrt(xp // 100)``.
  Because ``100 * L**2 <= xp`` is equivalent to ``L**2 <= xp // 100`` for
  integers, the closed form is exact for every non-negative int and never
  suffers float rounding. `level_from_xp_scan` is the plain upward search,
  kept so tests can check the two agree.

Usage
-----
    from voidcore.domain.models.level_curve import progress

    snapshot = progress(8450)
    snapshot.level      # 9
    snapshot.xp_to_next # 1550
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict

from voidcore.domain.models.base import validate_int, validate_non_negative

XP_PER_LEVEL_SQUARED = 100


def xp_for_level(level: int) -> int:
    """
    Total XP required to reach ``level``.

    Example:
        >>> xp_for_level(0)
        0
        >>> xp_for_level(10)
        10000
    """
    validate_int(level, "level")
    validate_non_negative(level, "level")
    return XP_PER_LEVEL_SQUARED * level * level


def level_from_xp(xp: int) -> int:
    """
    Largest level whose XP threshold is at or below ``xp``.

    Example:
        >>> level_from_xp(8450)
        9
        >>> level_from_xp(10000)
        10
    """
    validate_int(xp, "xp")
    validate_non_negative(xp, "xp")
    return math.isqrt(xp // XP_PER_LEVEL_SQUARED)


def level_from_xp_scan(xp: int) -> int:
    """Reference implementation of `level_from_xp` by upward search."""
    validate_int(xp, "xp")
    validate_non_negative(xp, "xp")
    level = 0
    while xp >= xp_for_level(level + 1):
        level += 1
    return level


@dataclass(frozen=True)
class LevelProgress:
    """
    Derived position of an XP total on the level curve.

    Attributes
    ----------
    level : int
        Current level
    xp : int
        Total XP the snapshot was computed from
    xp_into_level : int
        XP earned since the current level's threshold
    xp_to_next : int
        XP still missing to reach the next level
    percent : float
        Progress through the current level, clamped to [0, 100]
    """

    level: int
    xp: int
    xp_into_level: int
    xp_to_next: int
    percent: float

    def to_dict(self) -> Dict[str, Any]:
        """External shape used by the skill endpoints."""
        return {
            "level": self.level,
            "xp": self.xp,
            "xpToNext": self.xp_to_next,
            "progress": round(self.percent, 1),
        }


def progress(xp: int) -> LevelProgress:
    """
    Compute the level progress snapshot for ``xp``.

    Example:
        >>> p = progress(8450)
        >>> (p.level, p.xp_into_level, p.xp_to_next, round(p.percent, 1))
        (9, 350, 1550, 18.4)
    """
    level = level_from_xp(xp)
    floor_xp = xp_for_level(level)
    next_xp = xp_for_level(level + 1)

    xp_into_level = xp - floor_xp
    span = next_xp - floor_xp
    percent = min(100.0, max(0.0, 100.0 * xp_into_level / span))

    return LevelProgress(
        level=level,
        xp=xp,
        xp_into_level=xp_into_level,
        xp_to_next=next_xp - xp,
        percent=percent,
    )
