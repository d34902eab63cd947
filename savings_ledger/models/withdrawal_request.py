"""
Withdrawal request model.

A user files a request against one of their withdrawal
transactions when it needs manual review. Requests are only
ever moved out of PENDING by a review decision and are never
deleted.
"""

import uuid
from datetime import datetime

from sqlalchemy import Text, DateTime, ForeignKey, Enum as SAEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from savings_ledger.models.base import Base
from savings_ledger.models.enums import WithdrawalRequestStatus


# PENDING is the only state a decision can leave
VALID_TRANSITIONS: dict[WithdrawalRequestStatus, set[WithdrawalRequestStatus]] = {
    WithdrawalRequestStatus.PENDING: {
        WithdrawalRequestStatus.APPROVED,
        WithdrawalRequestStatus.REJECTED,
    },
    WithdrawalRequestStatus.APPROVED: set(),
    WithdrawalRequestStatus.REJECTED: set(),
}


class WithdrawalRequest(Base):
    __tablename__ = "withdrawal_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("transactions.id"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    document_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[WithdrawalRequestStatus] = mapped_column(
        SAEnum(
            WithdrawalRequestStatus,
            name="withdrawal_request_status_enum",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=WithdrawalRequestStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    decided_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    transaction: Mapped["Transaction"] = relationship()

    def can_transition_to(self, new_status: WithdrawalRequestStatus) -> bool:
        """Check if a review decision is allowed."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return f"<WithdrawalRequest {self.id} ({self.status.value})>"
