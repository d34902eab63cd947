"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class PlanType(str, enum.Enum):
    """What a savings account is being used for."""
    PROJECT = "project"
    GOAL = "goal"


class TransactionType(str, enum.Enum):
    """Direction of a ledger operation."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class TransactionStatus(str, enum.Enum):
    # Only committed operations are ever written
    COMPLETED = "completed"


class WithdrawalRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
