"""
Savings account model.

The balance is stored on the row and is only ever changed
through LedgerStore.adjust_balance(), which applies the delta
in a single conditional UPDATE. The CHECK constraint is the
last line that keeps a balance from going negative.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    String, Text, Integer, Boolean, DateTime, ForeignKey,
    CheckConstraint, Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from savings_ledger.models.base import Base
from savings_ledger.models.enums import PlanType


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # Smallest currency unit
    balance: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    target_amount: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    plan_type: Mapped[PlanType | None] = mapped_column(
        SAEnum(
            PlanType,
            name="plan_type_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=True,
    )
    plan_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_main: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="accounts")
    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="account"
    )

    def __repr__(self) -> str:
        return f"<Account {self.id} balance={self.balance}>"
