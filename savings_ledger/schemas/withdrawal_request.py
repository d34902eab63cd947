"""
Pydantic schemas for withdrawal review requests.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from savings_ledger.models.enums import WithdrawalRequestStatus


class WithdrawalRequestCreate(BaseModel):
    transaction_id: uuid.UUID
    reason: str = Field(min_length=1, max_length=1000)
    document_url: str | None = Field(default=None, max_length=2048)


class WithdrawalRequestDecision(BaseModel):
    """Review outcome. Only APPROVED or REJECTED are accepted."""
    status: WithdrawalRequestStatus


class WithdrawalRequestResponse(BaseModel):
    id: uuid.UUID
    transaction_id: uuid.UUID
    user_id: uuid.UUID
    reason: str
    document_url: str | None
    status: WithdrawalRequestStatus
    created_at: datetime
    decided_at: datetime | None

    model_config = {"from_attributes": True}
