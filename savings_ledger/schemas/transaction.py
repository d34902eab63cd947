"""
Pydantic schemas for deposit and withdrawal operations.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from savings_ledger.models.enums import TransactionType, TransactionStatus


class LedgerOperationRequest(BaseModel):
    """
    Body of a deposit or withdrawal.

    The amount is deliberately not range-checked here: a
    non-positive amount is rejected by the service with
    InvalidAmountError so every entry point reports it the
    same way.
    """
    amount: int
    pin: str = Field(min_length=1, max_length=12)
    note: str | None = Field(default=None, max_length=255)


class TransactionResponse(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    type: TransactionType = Field(validation_alias="transaction_type")
    amount: int
    note: str | None
    status: TransactionStatus
    created_at: datetime

    model_config = {"from_attributes": True}
