"""
Fee distribution across economic sinks.

Purpose
-------
Split an incoming fee (marketplace cut, swap fee, casino rake) across fixed
percentage sinks so that every unit of currency lands somewhere.

Design Notes
------------
- `FeeSplit` is validated once, when it is built; `distribute` trusts it.
- Allocations are integer currency units. Each sink receives the floor of its
  share and the rounding remainder goes to one designated sink (the first
  sink unless configured otherwise), so ``sum(allocations) == fee_amount``
  holds for every call.

Usage
-----
    allocations = distribute(1001, DEFAULT_FEE_SPLIT)
    # {'xvoid': 401, 'psx': 200, 'create': 200, 'cdn': 100, 'vault': 100}
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional

from voidcore.domain.exceptions import InvalidArgumentError
from voidcore.domain.models.base import validate_int, validate_non_negative, validate_not_empty

TOTAL_PERCENT = 100


class FeeSplit:
    """
    Ordered mapping of sink name to whole percentage, summing to 100.

    Args:
        shares: Sink name -> percentage, in the order allocations are reported
        remainder_sink: Sink that absorbs rounding remainders (default: first)

    Raises:
        InvalidArgumentError: Empty split, bad sink name, negative or
            non-integer percentage, total other than 100, or unknown
            remainder sink
    """

    __slots__ = ("_shares", "_remainder_sink")

    def __init__(self, shares: Mapping[str, int], remainder_sink: Optional[str] = None) -> None:
        if not shares:
            raise InvalidArgumentError("split", "at least one sink is required")

        for sink, percent in shares.items():
            validate_not_empty(sink, "sink")
            validate_int(percent, f"split[{sink}]")
            validate_non_negative(percent, f"split[{sink}]")

        total = sum(shares.values())
        if total != TOTAL_PERCENT:
            raise InvalidArgumentError(
                "split", f"percentages must sum to {TOTAL_PERCENT}, got {total}"
            )

        if remainder_sink is None:
            remainder_sink = next(iter(shares))
        elif remainder_sink not in shares:
            raise InvalidArgumentError(
                "remainder_sink", f"{remainder_sink!r} is not one of the configured sinks"
            )

        self._shares: Mapping[str, int] = MappingProxyType(dict(shares))
        self._remainder_sink = remainder_sink

    @property
    def shares(self) -> Mapping[str, int]:
        return self._shares

    @property
    def remainder_sink(self) -> str:
        return self._remainder_sink

    @property
    def sinks(self) -> list[str]:
        return list(self._shares)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeeSplit):
            return NotImplemented
        return (
            list(self._shares.items()) == list(other._shares.items())
            and self._remainder_sink == other._remainder_sink
        )

    def __hash__(self) -> int:
        return hash((tuple(self._shares.items()), self._remainder_sink))

    def __repr__(self) -> str:
        return f"FeeSplit({dict(self._shares)!r}, remainder_sink={self._remainder_sink!r})"


# xVOID stakers, PSX treasury, CREATE DAO, CDN partners, vault reserve.
DEFAULT_FEE_SPLIT = FeeSplit(
    {
        "xvoid": 40,
        "psx": 20,
        "create": 20,
        "cdn": 10,
        "vault": 10,
    }
)


def distribute(fee_amount: int, split: FeeSplit) -> Dict[str, int]:
    """
    Allocate ``fee_amount`` across the sinks of ``split``.

    Args:
        fee_amount: Fee in whole currency units, zero or greater
        split: Validated fee split

    Returns:
        Sink -> allocated units, in the split's order, summing to fee_amount

    Raises:
        InvalidArgumentError: If fee_amount is negative or not an integer

    Example:
        >>> distribute(7, FeeSplit({"a": 50, "b": 50}))
        {'a': 4, 'b': 3}
    """
    validate_int(fee_amount, "fee_amount")
    validate_non_negative(fee_amount, "fee_amount")

    allocations = {
        sink: fee_amount * percent // TOTAL_PERCENT for sink, percent in split.shares.items()
    }
    allocations[split.remainder_sink] += fee_amount - sum(allocations.values())
    return allocations
