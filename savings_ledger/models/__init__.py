"""
Database models package.

All models must be imported here so that Base.metadata knows
every table when the schema is created.
"""

from savings_ledger.models.base import Base, engine
from savings_ledger.models.enums import (
    PlanType,
    TransactionType,
    TransactionStatus,
    WithdrawalRequestStatus,
)
from savings_ledger.models.user import User
from savings_ledger.models.account import Account
from savings_ledger.models.transaction import Transaction
from savings_ledger.models.withdrawal_request import WithdrawalRequest
from savings_ledger.models.pin_attempt import PinAttempt

__all__ = [
    "Base",
    "PlanType",
    "TransactionType",
    "TransactionStatus",
    "WithdrawalRequestStatus",
    "User",
    "Account",
    "Transaction",
    "WithdrawalRequest",
    "PinAttempt",
    "init_db",
]


def init_db() -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)
