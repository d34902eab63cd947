"""
Withdrawal request service — manual review of withdrawals.

A user files a request against one of their own withdrawal
transactions. A reviewer later approves or rejects it, once.
Every change is pushed to the owning user's channel after it
commits.
"""

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from savings_ledger.errors import (
    InvalidWithdrawalRequestError,
    TransactionNotFoundError,
    WithdrawalRequestNotFoundError,
)
from savings_ledger.logging_config import get_logger
from savings_ledger.models.account import Account
from savings_ledger.models.enums import TransactionType, WithdrawalRequestStatus
from savings_ledger.models.base import unit_of_work
from savings_ledger.models.withdrawal_request import WithdrawalRequest
from savings_ledger.schemas.withdrawal_request import (
    WithdrawalRequestCreate,
    WithdrawalRequestResponse,
)
from savings_ledger.services.ledger_store import LedgerStore
from savings_ledger.services.notifier import (
    ChangeEvent,
    ChangeNotifier,
    get_notifier,
)

logger = get_logger("withdrawal_requests")


class WithdrawalRequestService:

    def __init__(self, db: Session, notifier: ChangeNotifier | None = None):
        self.db = db
        self.store = LedgerStore(db)
        self.notifier = notifier or get_notifier()

    def _publish(self, request: WithdrawalRequest) -> None:
        payload = WithdrawalRequestResponse.model_validate(request).model_dump(
            mode="json"
        )
        self.notifier.publish(
            request.user_id,
            ChangeEvent.WITHDRAWAL_REQUEST_CHANGED,
            {"user_id": str(request.user_id), "request": payload},
        )

    def create(
        self, user_id: uuid.UUID, request: WithdrawalRequestCreate
    ) -> WithdrawalRequest:
        """File a review request for one of the user's withdrawals."""
        txn = self.store.get_transaction(request.transaction_id)
        account = self.db.get(Account, txn.account_id)
        if account is None or account.user_id != user_id:
            raise TransactionNotFoundError(
                f"Transaction {request.transaction_id} not found"
            )
        if txn.transaction_type != TransactionType.WITHDRAWAL:
            raise InvalidWithdrawalRequestError(
                "Only withdrawals can be submitted for review"
            )

        with unit_of_work(self.db):
            withdrawal_request = WithdrawalRequest(
                transaction_id=txn.id,
                user_id=user_id,
                reason=request.reason,
                document_url=request.document_url,
            )
            self.db.add(withdrawal_request)
            self.db.flush()

        logger.info(
            "Withdrawal request filed",
            extra={"user_id": str(user_id), "transaction_id": str(txn.id)},
        )
        self._publish(withdrawal_request)
        return withdrawal_request

    def list_for_user(self, user_id: uuid.UUID) -> list[WithdrawalRequest]:
        requests = self.db.execute(
            select(WithdrawalRequest)
            .where(WithdrawalRequest.user_id == user_id)
            .order_by(WithdrawalRequest.created_at.desc())
        ).scalars().all()
        return list(requests)

    def decide(
        self, request_id: uuid.UUID, new_status: WithdrawalRequestStatus
    ) -> WithdrawalRequest:
        """
        Approve or reject a pending request.

        Decisions are final: a request that already left PENDING
        cannot be decided again.
        """
        withdrawal_request = self.db.get(WithdrawalRequest, request_id)
        if withdrawal_request is None:
            raise WithdrawalRequestNotFoundError(
                f"Withdrawal request {request_id} not found"
            )
        if not withdrawal_request.can_transition_to(new_status):
            raise InvalidWithdrawalRequestError(
                f"Cannot transition from {withdrawal_request.status.value} "
                f"to {new_status.value}"
            )

        with unit_of_work(self.db):
            withdrawal_request.status = new_status
            withdrawal_request.decided_at = datetime.utcnow()

        logger.info(
            "Withdrawal request %s", new_status.value,
            extra={"user_id": str(withdrawal_request.user_id)},
        )
        self._publish(withdrawal_request)
        return withdrawal_request
