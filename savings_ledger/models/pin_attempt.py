"""
PIN attempt counter model.

Consecutive failed PIN verifications per user. The row is
created on the first failure and its count goes back to zero
after a successful verification.
"""

import uuid
from datetime import datetime

from sqlalchemy import Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from savings_ledger.models.base import Base


class PinAttempt(Base):
    __tablename__ = "pin_attempts"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), primary_key=True
    )
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_attempt: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    def __repr__(self) -> str:
        return f"<PinAttempt {self.user_id} count={self.count}>"
