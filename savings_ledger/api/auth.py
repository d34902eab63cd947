"""
Registration, login and PIN endpoints.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from savings_ledger.api.deps import get_current_user_id
from savings_ledger.errors import SavingsError
from savings_ledger.models.base import get_db
from savings_ledger.schemas.auth import (
    UserRegister,
    UserLogin,
    PinSet,
    UserResponse,
    TokenResponse,
)
from savings_ledger.services.tokens import create_access_token
from savings_ledger.services.user_service import UserService, to_user_response

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(
    request: UserRegister,
    db: Session = Depends(get_db),
):
    """Create a user and return an access token for it."""
    service = UserService(db)
    try:
        user = service.register(request)
        db.commit()
        return TokenResponse(
            access_token=create_access_token(user.id),
            user=to_user_response(user),
        )
    except SavingsError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.post("/login", response_model=TokenResponse)
def login(
    request: UserLogin,
    db: Session = Depends(get_db),
):
    """Log in with username, email or phone plus password."""
    service = UserService(db)
    try:
        user = service.authenticate(request.identifier, request.password)
        return TokenResponse(
            access_token=create_access_token(user.id),
            user=to_user_response(user),
        )
    except SavingsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.post("/pin", response_model=UserResponse)
def set_pin(
    request: PinSet,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Set or change the PIN used to authorize ledger operations.

    Requires the account password and clears any PIN lockout.
    """
    service = UserService(db)
    try:
        user = service.set_pin(user_id, request.password, request.pin)
        return to_user_response(user)
    except SavingsError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
