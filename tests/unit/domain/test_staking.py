"""
Unit Tests for the Staking Account
==================================

Test Coverage
-------------
- Deposit, stake and unstake balance moves
- Daily withdrawal quota with calendar-day rollover
- Simple interest accrual and claiming
- Balance view shape
- Failed operations leave the account untouched
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from voidcore.domain.exceptions import (
    InsufficientFundsError,
    InvalidArgumentError,
    QuotaExceededError,
)
from voidcore.domain.models.staking import StakingAccount, start_of_day

NOW = datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def account() -> StakingAccount:
    """75000 deposited, 50000 staked at 5% with a 10000 daily limit."""
    return (
        StakingAccount(apr=Decimal("5.0"), daily_limit=Decimal(10000))
        .deposit(75000)
        .stake(50000)
    )


@pytest.mark.unit
@pytest.mark.domain
class TestBalanceMoves:
    """Test deposit, stake and unstake."""

    def test_stake_moves_liquid_to_staked(self, account):
        assert account.liquid_balance == Decimal(25000)
        assert account.staked_balance == Decimal(50000)

    def test_stake_then_unstake_round_trips(self, account):
        # Act
        result = account.stake(1000).unstake(1000)

        # Assert
        assert result == account

    def test_stake_more_than_liquid_rejected(self, account):
        with pytest.raises(InsufficientFundsError):
            account.stake(25001)

    def test_unstake_more_than_staked_rejected(self, account):
        with pytest.raises(InsufficientFundsError):
            account.unstake(50001)

    @pytest.mark.parametrize("bad", [0, -5, "abc", float("nan"), True])
    def test_invalid_amounts_rejected(self, account, bad):
        with pytest.raises(InvalidArgumentError):
            account.deposit(bad)

    def test_unstake_does_not_use_quota(self, account):
        result = account.unstake(20000)

        assert result.withdrawn_today == Decimal(0)
        assert result.remaining_daily_limit(NOW) == Decimal(10000)

    def test_fractional_amounts_stay_exact(self):
        result = StakingAccount().deposit("0.1").deposit("0.2")

        assert result.liquid_balance == Decimal("0.3")


@pytest.mark.unit
@pytest.mark.domain
class TestWithdrawalQuota:
    """Test the daily withdrawal limit."""

    def test_withdraw_counts_against_quota(self, account):
        # Act
        result = account.withdraw(2500, NOW)

        # Assert
        assert result.liquid_balance == Decimal(22500)
        assert result.withdrawn_today == Decimal(2500)
        assert result.remaining_daily_limit(NOW) == Decimal(7500)

    def test_exactly_the_limit_is_allowed(self, account):
        result = account.withdraw(10000, NOW)

        assert result.remaining_daily_limit(NOW) == Decimal(0)

    def test_over_quota_rejected_and_account_unchanged(self, account):
        # Arrange
        after_first = account.withdraw(2500, NOW)

        # Act & Assert
        with pytest.raises(QuotaExceededError) as exc_info:
            after_first.withdraw(7501, NOW)

        assert exc_info.value.daily_limit == Decimal(10000)
        assert after_first.withdrawn_today == Decimal(2500)
        assert after_first.liquid_balance == Decimal(22500)

    def test_insufficient_liquid_rejected(self):
        account = StakingAccount(daily_limit=Decimal(10000)).deposit(100)

        with pytest.raises(InsufficientFundsError):
            account.withdraw(101, NOW)

    def test_quota_resets_next_calendar_day(self, account):
        # Arrange
        exhausted = account.withdraw(10000, NOW)
        tomorrow = start_of_day(NOW) + timedelta(days=1)

        # Act
        result = exhausted.withdraw(10000, tomorrow)

        # Assert
        assert result.withdrawn_today == Decimal(10000)
        assert result.window_start == tomorrow

    def test_same_day_later_hour_does_not_reset(self, account):
        exhausted = account.withdraw(10000, NOW)

        with pytest.raises(QuotaExceededError):
            exhausted.withdraw(1, NOW.replace(hour=23, minute=59))

    def test_balance_view_reflects_rollover(self, account):
        exhausted = account.withdraw(10000, NOW)

        view = exhausted.to_dict(NOW + timedelta(days=1))

        assert view["withdrawnToday"] == 0.0
        assert exhausted.withdrawn_today == Decimal(10000)

    def test_withdrawn_above_limit_rejected_on_construction(self):
        with pytest.raises(InvalidArgumentError):
            StakingAccount(daily_limit=Decimal(10), withdrawn_today=Decimal(11))

    def test_carried_over_total_without_window_counts_today(self):
        # Arrange
        account = StakingAccount(
            liquid_balance=25000,
            staked_balance=50000,
            apr=Decimal("5.0"),
            daily_limit=10000,
            withdrawn_today=2500,
        )

        # Act & Assert
        with pytest.raises(QuotaExceededError):
            account.withdraw(8000, NOW)

        result = account.withdraw(7500, NOW)
        assert result.withdrawn_today == Decimal(10000)
        assert result.window_start == start_of_day(NOW)
        assert result.remaining_daily_limit(NOW) == Decimal(0)

    def test_naive_now_rejected(self, account):
        after_first = account.withdraw(100, NOW)

        with pytest.raises(InvalidArgumentError) as exc_info:
            after_first.withdraw(100, datetime(2025, 3, 14, 13))

        assert exc_info.value.field == "now"

    def test_naive_window_start_rejected(self):
        with pytest.raises(InvalidArgumentError):
            StakingAccount(daily_limit=10, window_start=datetime(2025, 3, 14))

    def test_window_follows_utc_calendar_day(self, account):
        # 23:30 on the 14th at UTC-5 is 04:30 UTC on the 15th.
        evening_new_york = datetime(2025, 3, 14, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        exhausted = account.withdraw(10000, NOW)

        result = exhausted.withdraw(10000, evening_new_york)

        assert result.window_start == datetime(2025, 3, 15, tzinfo=timezone.utc)
        assert result.window_start.tzinfo is timezone.utc


@pytest.mark.unit
@pytest.mark.domain
class TestInterest:
    """Test interest accrual and claiming."""

    def test_one_year_of_interest(self, account):
        """50000 staked at 5% earns 2500 over 365 days."""
        result = account.accrue_interest(365)

        assert result.accrued_interest == Decimal(2500)

    def test_daily_interest(self, account):
        assert float(account.daily_interest) == pytest.approx(6.849, abs=0.001)

    def test_fractional_days(self, account):
        half_day = account.accrue_interest("0.5")

        assert float(half_day.accrued_interest * 2) == pytest.approx(float(account.daily_interest))

    def test_negative_elapsed_days_rejected(self, account):
        with pytest.raises(InvalidArgumentError):
            account.accrue_interest(-1)

    def test_claim_moves_interest_to_liquid(self, account):
        # Arrange
        accrued = account.accrue_interest(365)

        # Act
        claimed = accrued.claim_interest()

        # Assert
        assert claimed.accrued_interest == Decimal(0)
        assert claimed.liquid_balance == Decimal(27500)
        assert claimed.total_interest_earned == Decimal(2500)

    def test_claim_with_nothing_accrued_is_noop(self, account):
        assert account.claim_interest() is account


@pytest.mark.unit
@pytest.mark.domain
class TestBalanceView:
    """Test the external currency shape."""

    def test_reference_scenario(self, account):
        # Arrange
        after = account.withdraw(2500, NOW)

        # Act
        view = after.to_dict(NOW)

        # Assert
        assert view == {
            "balance": 22500.0,
            "staked": 50000.0,
            "dailyInterest": 6.85,
            "accruedInterest": 0.0,
            "totalInterestEarned": 0.0,
            "apr": 5.0,
            "dailyLimit": 10000.0,
            "withdrawnToday": 2500.0,
        }
