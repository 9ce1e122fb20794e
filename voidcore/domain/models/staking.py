"""
Staking ledger domain model.

Purpose
-------
Per-player VOID currency state: liquid balance, staked balance, interest
accrual on the staked balance and a daily cap on withdrawals out of the
system.

Responsibilities
----------------
- Move currency between liquid and staked balances
- Enforce the daily withdrawal quota with a calendar-day window
- Accrue simple interest on the staked balance for caller-supplied time
- Move accrued interest into the liquid balance on claim

Non-Responsibilities
--------------------
- Reading the clock (``now`` and ``elapsed_days`` come from the caller)
- Persistence and locking (handled by the bank service)

Design Notes
------------
`StakingAccount` is a frozen dataclass. Every operation validates first and
returns a new account built with `dataclasses.replace`, so a failed
operation can never leave a half-applied account behind.

Interest never compounds into the staked principal on its own. It sits in
``accrued_interest`` until the player claims it, and only explicit stake,
unstake and claim actions change the principal.

Usage Example
-------------
>>> from datetime import datetime, timezone
>>> acct = StakingAccount(liquid_balance=25000, staked_balance=50000,
...                       apr=5, daily_limit=10000)
>>> acct = acct.withdraw(7500, now=datetime(2025, 1, 1, 12, tzinfo=timezone.utc))
>>> acct.withdrawn_today
Decimal('7500')
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from voidcore.domain.exceptions import (
    InsufficientFundsError,
    InvalidArgumentError,
    QuotaExceededError,
)
from voidcore.domain.models.base import (
    ZERO,
    Amount,
    to_amount,
    validate_non_negative,
    validate_positive,
)

DAYS_PER_YEAR = Decimal(365)
HUNDRED = Decimal(100)


def to_utc(moment: datetime, field: str = "now") -> datetime:
    """Convert an aware datetime to UTC. Naive datetimes are rejected."""
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise InvalidArgumentError(field, "must be timezone-aware")
    return moment.astimezone(timezone.utc)


def start_of_day(moment: datetime) -> datetime:
    """UTC midnight of the UTC calendar day containing ``moment``."""
    return to_utc(moment).replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class StakingAccount:
    """
    Immutable snapshot of one player's bank account.

    Attributes
    ----------
    liquid_balance : Decimal
        Spendable VOID (shown as ``balance``)
    staked_balance : Decimal
        VOID earning interest (shown as ``staked``)
    apr : Decimal
        Annual percentage rate applied to the staked balance
    accrued_interest : Decimal
        Interest earned and not yet claimed
    daily_limit : Decimal
        Maximum total withdrawal per daily window
    withdrawn_today : Decimal
        Total withdrawn in the current window
    window_start : Optional[datetime]
        UTC start of the current window; None until the first withdrawal
    total_interest_earned : Decimal
        Lifetime claimed interest
    """

    liquid_balance: Decimal = ZERO
    staked_balance: Decimal = ZERO
    apr: Decimal = ZERO
    accrued_interest: Decimal = ZERO
    daily_limit: Decimal = ZERO
    withdrawn_today: Decimal = ZERO
    window_start: Optional[datetime] = None
    total_interest_earned: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in (
            "liquid_balance",
            "staked_balance",
            "apr",
            "accrued_interest",
            "daily_limit",
            "withdrawn_today",
            "total_interest_earned",
        ):
            value = to_amount(getattr(self, name), name)
            validate_non_negative(value, name)
            object.__setattr__(self, name, value)

        if self.withdrawn_today > self.daily_limit:
            raise InvalidArgumentError(
                "withdrawn_today",
                f"{self.withdrawn_today} exceeds daily limit {self.daily_limit}",
            )

        if self.window_start is not None:
            object.__setattr__(self, "window_start", to_utc(self.window_start, "window_start"))

    # ========================================================================
    # DERIVED VALUES
    # ========================================================================

    @property
    def daily_interest(self) -> Decimal:
        """Interest one day of staking currently earns."""
        return self.staked_balance * self.apr / HUNDRED / DAYS_PER_YEAR

    def _window_for(self, now: datetime) -> tuple[Decimal, Optional[datetime]]:
        """(withdrawn_today, window_start) after applying the reset rule at ``now``."""
        day = start_of_day(now)
        if self.window_start is None:
            # Carried-over total with no recorded window counts toward today.
            return self.withdrawn_today, day
        if day > self.window_start:
            return ZERO, day
        return self.withdrawn_today, self.window_start

    def remaining_daily_limit(self, now: datetime) -> Decimal:
        withdrawn, _ = self._window_for(now)
        return self.daily_limit - withdrawn

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def deposit(self, amount: Amount) -> StakingAccount:
        """Credit ``amount`` to the liquid balance."""
        value = to_amount(amount, "amount")
        validate_positive(value, "amount")
        return replace(self, liquid_balance=self.liquid_balance + value)

    def stake(self, amount: Amount) -> StakingAccount:
        """
        Move ``amount`` from liquid to staked. Does not touch the quota.

        Raises
        ------
        InvalidArgumentError
            If amount is not positive
        InsufficientFundsError
            If amount exceeds the liquid balance
        """
        value = to_amount(amount, "amount")
        validate_positive(value, "amount")
        if value > self.liquid_balance:
            raise InsufficientFundsError("liquid", value, self.liquid_balance)
        return replace(
            self,
            liquid_balance=self.liquid_balance - value,
            staked_balance=self.staked_balance + value,
        )

    def unstake(self, amount: Amount) -> StakingAccount:
        """
        Move ``amount`` from staked back to liquid.

        Unstaking keeps the VOID inside the system, so it is not counted
        against the daily withdrawal limit.

        Raises
        ------
        InvalidArgumentError
            If amount is not positive
        InsufficientFundsError
            If amount exceeds the staked balance
        """
        value = to_amount(amount, "amount")
        validate_positive(value, "amount")
        if value > self.staked_balance:
            raise InsufficientFundsError("staked", value, self.staked_balance)
        return replace(
            self,
            liquid_balance=self.liquid_balance + value,
            staked_balance=self.staked_balance - value,
        )

    def withdraw(self, amount: Amount, now: datetime) -> StakingAccount:
        """
        Withdraw ``amount`` of liquid VOID out of the system.

        The window is reset first when ``now`` falls on a later UTC calendar
        day than ``window_start``. ``now`` must be timezone-aware. The reset is part of the returned account
        only, so a rejected withdrawal changes nothing.

        Raises
        ------
        InvalidArgumentError
            If amount is not positive or ``now`` is naive
        InsufficientFundsError
            If amount exceeds the liquid balance
        QuotaExceededError
            If the window total would exceed the daily limit
        """
        value = to_amount(amount, "amount")
        validate_positive(value, "amount")
        withdrawn, window_start = self._window_for(now)

        if value > self.liquid_balance:
            raise InsufficientFundsError("liquid", value, self.liquid_balance)
        if withdrawn + value > self.daily_limit:
            raise QuotaExceededError(value, withdrawn, self.daily_limit)

        return replace(
            self,
            liquid_balance=self.liquid_balance - value,
            withdrawn_today=withdrawn + value,
            window_start=window_start,
        )

    def accrue_interest(self, elapsed_days: Amount) -> StakingAccount:
        """
        Add simple interest for ``elapsed_days`` on the staked balance.

        ``accrued += staked * (apr / 100) * (elapsed_days / 365)``

        Raises
        ------
        InvalidArgumentError
            If elapsed_days is negative
        """
        days = to_amount(elapsed_days, "elapsed_days")
        validate_non_negative(days, "elapsed_days")
        earned = self.staked_balance * (self.apr / HUNDRED) * (days / DAYS_PER_YEAR)
        return replace(self, accrued_interest=self.accrued_interest + earned)

    def claim_interest(self) -> StakingAccount:
        """Move accrued interest into the liquid balance. Zero accrued is a no-op."""
        if self.accrued_interest == ZERO:
            return self
        return replace(
            self,
            liquid_balance=self.liquid_balance + self.accrued_interest,
            accrued_interest=ZERO,
            total_interest_earned=self.total_interest_earned + self.accrued_interest,
        )

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def to_dict(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        External shape of the currency endpoint.

        When ``now`` is given, ``withdrawnToday`` reflects the window reset
        that the next withdrawal would apply.
        """
        withdrawn = self.withdrawn_today
        if now is not None:
            withdrawn, _ = self._window_for(now)
        return {
            "balance": float(self.liquid_balance),
            "staked": float(self.staked_balance),
            "dailyInterest": round(float(self.daily_interest), 2),
            "accruedInterest": round(float(self.accrued_interest), 2),
            "totalInterestEarned": round(float(self.total_interest_earned), 2),
            "apr": float(self.apr),
            "dailyLimit": float(self.daily_limit),
            "withdrawnToday": float(withdrawn),
        }
