"""
Bank service: VOID balances, staking, interest and withdrawals.

Purpose
-------
Run every `StakingAccount` operation as one locked load-modify-save cycle,
record the bank history and publish ``bank.*`` events.

Responsibilities
----------------
- Open accounts lazily with the configured APR and daily limit
- Serialize operations per player (one `asyncio.Lock` per player id)
- Store a `BankTransaction` with every balance-changing operation, in the
  same save as the account
- Log each operation and each rejection

Non-Responsibilities
--------------------
- Balance rules and quota math (``voidcore.domain.models.staking``)
- Scheduling interest accrual (callers pass ``elapsed_days``)

Events
------
``bank.deposited``, ``bank.staked``, ``bank.unstaked``, ``bank.withdrawn``,
``bank.interest_accrued``, ``bank.interest_claimed``
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from voidcore.domain.models.base import Amount, to_amount, validate_int, validate_not_empty
from voidcore.domain.models.staking import StakingAccount
from voidcore.domain.models.transaction import BankTransaction, TransactionType, describe
from voidcore.modules.shared.base_service import BaseService
from voidcore.modules.shared.locks import PlayerLockRegistry

if TYPE_CHECKING:
    from logging import Logger

    from voidcore.core.config.manager import ConfigManager
    from voidcore.core.event.bus import EventBus
    from voidcore.modules.shared.repository import AccountRepository, TransactionLog


class BankService(BaseService):
    """
    Service for the per-player VOID bank.

    Public Methods
    --------------
    - get_currency() -> Balance view (balance, staked, dailyInterest, ...)
    - deposit() / withdraw() -> Move VOID into / out of the system
    - stake() / unstake() -> Move VOID between liquid and staked
    - accrue_interest() -> Add interest for elapsed days
    - claim_interest() -> Move accrued interest to the liquid balance
    - get_transactions() -> Newest-first bank history
    """

    def __init__(
        self,
        accounts: AccountRepository,
        transactions: TransactionLog,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        locks: Optional[PlayerLockRegistry] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._accounts = accounts
        self._transactions = transactions
        self._locks = locks or PlayerLockRegistry()

    def _new_account(self) -> StakingAccount:
        return StakingAccount(
            apr=to_amount(self.get_config("staking.default_apr", 5.0), "staking.default_apr"),
            daily_limit=to_amount(
                self.get_config("staking.default_daily_limit", 10000),
                "staking.default_daily_limit",
            ),
        )

    async def _load(self, player_id: str) -> StakingAccount:
        account = await self._accounts.load(player_id)
        return account if account is not None else self._new_account()

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_currency(self, player_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Balance view of ``player_id``.

        When ``now`` is given, ``withdrawnToday`` already reflects a daily
        window that has rolled over.

        Example:
            >>> await bank.get_currency("p1", now)
            {'balance': 22500.0, 'staked': 50000.0, 'dailyInterest': 6.85,
             'accruedInterest': 0.0, 'totalInterestEarned': 0.0, 'apr': 5.0,
             'dailyLimit': 10000.0, 'withdrawnToday': 2500.0}
        """
        validate_not_empty(player_id, "player_id")
        account = await self._load(player_id)
        return account.to_dict(now)

    async def get_transactions(
        self, player_id: str, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Newest-first history, capped at ``bank.transaction_history_limit``."""
        validate_not_empty(player_id, "player_id")
        max_limit = int(self.get_config("bank.transaction_history_limit", 100))
        if limit is None:
            limit = max_limit
        validate_int(limit, "limit")
        limit = max(0, min(limit, max_limit))

        history = await self._transactions.recent(player_id, limit)
        return [tx.to_dict() for tx in history]

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def deposit(
        self, player_id: str, amount: Amount, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Credit ``amount`` to the liquid balance."""
        return await self._apply(
            "deposit",
            player_id,
            lambda account: account.deposit(amount),
            now,
            event="bank.deposited",
            tx_type=TransactionType.DEPOSIT,
            amount=amount,
        )

    async def stake(
        self, player_id: str, amount: Amount, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Move ``amount`` from liquid to staked.

        Raises:
            InvalidArgumentError: Non-positive amount
            InsufficientFundsError: Amount exceeds the liquid balance
        """
        return await self._apply(
            "stake",
            player_id,
            lambda account: account.stake(amount),
            now,
            event="bank.staked",
            tx_type=TransactionType.STAKE,
            amount=amount,
        )

    async def unstake(
        self, player_id: str, amount: Amount, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Move ``amount`` from staked back to liquid. Not counted against the quota."""
        return await self._apply(
            "unstake",
            player_id,
            lambda account: account.unstake(amount),
            now,
            event="bank.unstaked",
            tx_type=TransactionType.UNSTAKE,
            amount=amount,
        )

    async def withdraw(self, player_id: str, amount: Amount, now: datetime) -> Dict[str, Any]:
        """
        Withdraw ``amount`` out of the system, subject to the daily limit.

        Raises:
            InvalidArgumentError: Non-positive amount
            InsufficientFundsError: Amount exceeds the liquid balance
            QuotaExceededError: The day's withdrawals would exceed the limit
        """
        return await self._apply(
            "withdraw",
            player_id,
            lambda account: account.withdraw(amount, now),
            now,
            event="bank.withdrawn",
            tx_type=TransactionType.WITHDRAW,
            amount=amount,
        )

    async def accrue_interest(
        self, player_id: str, elapsed_days: Amount, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Add interest earned by the staked balance over ``elapsed_days``."""
        return await self._apply(
            "accrue_interest",
            player_id,
            lambda account: account.accrue_interest(elapsed_days),
            now,
            event="bank.interest_accrued",
            elapsed_days=str(elapsed_days),
        )

    async def claim_interest(
        self, player_id: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Move all accrued interest into the liquid balance. Zero accrued is a no-op."""
        return await self._apply(
            "claim_interest",
            player_id,
            lambda account: account.claim_interest(),
            now,
            event="bank.interest_claimed",
            tx_type=TransactionType.INTEREST,
        )

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _apply(
        self,
        operation: str,
        player_id: str,
        change: Callable[[StakingAccount], StakingAccount],
        now: Optional[datetime],
        *,
        event: str,
        tx_type: Optional[TransactionType] = None,
        **context: Any,
    ) -> Dict[str, Any]:
        """
        Locked load-modify-save of one account.

        The domain operation validates before anything is saved, so a
        rejected operation leaves the stored account untouched. The account
        and its history line are saved together.
        """
        log_context = {key: str(value) for key, value in context.items()}
        transaction: Optional[BankTransaction] = None
        try:
            validate_not_empty(player_id, "player_id")
            async with self._locks.hold(player_id):
                before = await self._load(player_id)
                after = change(before)

                # Signed from the liquid balance point of view.
                delta = after.liquid_balance - before.liquid_balance
                if tx_type is not None and delta != 0:
                    transaction = BankTransaction(
                        player_id=player_id,
                        type=tx_type,
                        amount=delta,
                        description=describe(tx_type, delta),
                        timestamp=now or datetime.now(timezone.utc),
                    )
                if after is not before:
                    await self._accounts.save(player_id, after, transaction)
        except Exception as e:
            self.log_error(operation, e, player_id=player_id, **log_context)
            raise

        self.log_operation(operation, player_id=player_id, **log_context)

        payload: Dict[str, Any] = {
            "player_id": player_id,
            "balance": str(after.liquid_balance),
            "staked": str(after.staked_balance),
            "accrued_interest": str(after.accrued_interest),
        }
        if transaction is not None:
            payload["amount"] = str(abs(transaction.amount))
            payload["transaction_id"] = transaction.id
        elif operation == "accrue_interest":
            payload["amount"] = str(after.accrued_interest - before.accrued_interest)
        else:
            payload["amount"] = "0"
        await self.emit_event(event, payload)

        return after.to_dict(now)
