"""VOID bank: balances, staking, interest and withdrawal quota."""

from voidcore.modules.bank.repository import SqlAlchemyStakingRepository, SqlAlchemyTransactionLog
from voidcore.modules.bank.service import BankService

__all__ = ["BankService", "SqlAlchemyStakingRepository", "SqlAlchemyTransactionLog"]
