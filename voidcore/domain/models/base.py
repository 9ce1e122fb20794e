"""
Shared validation helpers for the VOID domain models.

Purpose
-------
Provide the small set of precondition checks every domain model uses, so
that each rule violation surfaces as the same `InvalidArgumentError` with a
field name the API layer can report.

Design Notes
------------
- Validators raise, they never coerce silently.
- Currency amounts are `Decimal`. `to_amount` is the single entry point for
  turning caller input into a `Decimal`; floats go through `str()` so that
  ``0.1`` becomes ``Decimal("0.1")`` rather than its binary expansion.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from voidcore.domain.exceptions import InvalidArgumentError

Amount = Union[int, float, str, Decimal]

ZERO = Decimal(0)


def to_amount(value: Amount, field_name: str) -> Decimal:
    """
    Convert caller input into a finite `Decimal` currency amount.

    Parameters
    ----------
    value : Amount
        Integer, float, numeric string or Decimal
    field_name : str
        Name of the field (for error messages)

    Returns
    -------
    Decimal
        The amount as a Decimal

    Raises
    ------
    InvalidArgumentError
        If the value is not numeric, is NaN or infinite, or is a bool
    """
    if isinstance(value, bool):
        raise InvalidArgumentError(field_name, "must be a number, got bool")
    try:
        if isinstance(value, float):
            amount = Decimal(str(value))
        else:
            amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgumentError(field_name, f"must be a number, got {value!r}") from None
    if not amount.is_finite():
        raise InvalidArgumentError(field_name, f"must be finite, got {value!r}")
    return amount


def validate_positive(value: Union[int, Decimal], field_name: str) -> None:
    """
    Validate that a value is strictly positive.

    Raises
    ------
    InvalidArgumentError
        If value is zero or negative
    """
    if value <= 0:
        raise InvalidArgumentError(field_name, f"must be positive, got {value}")


def validate_non_negative(value: Union[int, Decimal], field_name: str) -> None:
    """
    Validate that a value is zero or greater.

    Raises
    ------
    InvalidArgumentError
        If value is negative
    """
    if value < 0:
        raise InvalidArgumentError(field_name, f"must be non-negative, got {value}")


def validate_int(value: object, field_name: str) -> int:
    """Reject bools, floats and anything else that is not a plain int."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(field_name, f"must be an integer, got {value!r}")
    return value


def validate_not_empty(value: str, field_name: str) -> None:
    """
    Validate that a string is not empty.

    Raises
    ------
    InvalidArgumentError
        If value is empty, whitespace-only or not a string
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(field_name, "cannot be empty")
