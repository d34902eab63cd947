"""
Savings account API endpoints.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from savings_ledger.api.deps import get_current_user_id
from savings_ledger.errors import SavingsError
from savings_ledger.models.base import get_db
from savings_ledger.schemas.account import AccountOpen, AccountResponse
from savings_ledger.services.account_service import AccountService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def open_account(
    request: AccountOpen,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Open a new savings account with a zero balance."""
    service = AccountService(db)
    account = service.open_account(user_id, request)
    db.commit()
    return account


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get the caller's accounts."""
    return AccountService(db).list_accounts(user_id)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get account details, including the current balance."""
    try:
        return AccountService(db).get_account(user_id, account_id)
    except SavingsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
