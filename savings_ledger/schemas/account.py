"""
Pydantic schemas for savings account operations.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from savings_ledger.models.enums import PlanType


class AccountOpen(BaseModel):
    """Request to open a new savings account."""
    phone: str | None = Field(default=None, max_length=20)
    target_amount: int | None = Field(default=None, ge=0)
    plan_type: PlanType | None = None
    plan_note: str | None = None
    is_main: bool = False


class AccountResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    phone: str | None
    balance: int
    target_amount: int | None
    plan_type: PlanType | None
    plan_note: str | None
    is_main: bool
    created_at: datetime

    model_config = {"from_attributes": True}
