"""
Withdrawal review request endpoints.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from savings_ledger.api.deps import get_current_user_id, require_reviewer
from savings_ledger.errors import SavingsError
from savings_ledger.models.base import get_db
from savings_ledger.schemas.withdrawal_request import (
    WithdrawalRequestCreate,
    WithdrawalRequestDecision,
    WithdrawalRequestResponse,
)
from savings_ledger.services.notifier import ChangeNotifier, get_notifier
from savings_ledger.services.withdrawal_request_service import (
    WithdrawalRequestService,
)

router = APIRouter(prefix="/withdrawal-requests", tags=["Withdrawal Requests"])


@router.post("", response_model=WithdrawalRequestResponse, status_code=201)
def create_withdrawal_request(
    request: WithdrawalRequestCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Submit one of the caller's withdrawals for manual review."""
    service = WithdrawalRequestService(db, notifier=notifier)
    try:
        return service.create(user_id, request)
    except SavingsError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.get("", response_model=list[WithdrawalRequestResponse])
def list_withdrawal_requests(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Get the caller's withdrawal requests, newest first."""
    return WithdrawalRequestService(db, notifier=notifier).list_for_user(user_id)


@router.patch(
    "/{request_id}/status",
    response_model=WithdrawalRequestResponse,
    dependencies=[Depends(require_reviewer)],
)
def decide_withdrawal_request(
    request_id: uuid.UUID,
    request: WithdrawalRequestDecision,
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """
    Approve or reject a pending request.

    Reviewer-only: the caller must present the reviewer key.
    """
    service = WithdrawalRequestService(db, notifier=notifier)
    try:
        return service.decide(request_id, request.status)
    except SavingsError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
