"""
Deposit and withdrawal endpoints.

The service commits each operation itself, because the change
notification has to follow the commit. On failure the route
only rolls back whatever the session still holds.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from savings_ledger.api.deps import get_current_user_id
from savings_ledger.errors import SavingsError
from savings_ledger.models.base import get_db
from savings_ledger.schemas.transaction import (
    LedgerOperationRequest,
    TransactionResponse,
)
from savings_ledger.services.notifier import ChangeNotifier, get_notifier
from savings_ledger.services.transaction_service import TransactionService

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post(
    "/{account_id}/deposit",
    response_model=TransactionResponse,
    status_code=201,
)
def deposit(
    account_id: uuid.UUID,
    request: LedgerOperationRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Deposit money into one of the caller's accounts."""
    service = TransactionService(db, notifier=notifier)
    try:
        return service.deposit(
            user_id, account_id, request.amount, request.pin, request.note
        )
    except SavingsError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.post(
    "/{account_id}/withdraw",
    response_model=TransactionResponse,
    status_code=201,
)
def withdraw(
    account_id: uuid.UUID,
    request: LedgerOperationRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Withdraw money from one of the caller's accounts."""
    service = TransactionService(db, notifier=notifier)
    try:
        return service.withdraw(
            user_id, account_id, request.amount, request.pin, request.note
        )
    except SavingsError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.get("/{account_id}", response_model=list[TransactionResponse])
def list_transactions(
    account_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Get an account's transactions, newest first."""
    service = TransactionService(db, notifier=notifier)
    try:
        return service.list_transactions(user_id, account_id)
    except SavingsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
