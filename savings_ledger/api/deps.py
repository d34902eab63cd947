"""
Shared request dependencies.

Routes get the caller's identity from the bearer token and
never from the request body.
"""

import uuid

from fastapi import Header, HTTPException

from savings_ledger.config import get_settings
from savings_ledger.errors import InvalidTokenError
from savings_ledger.services.tokens import decode_access_token


def get_current_user_id(
    authorization: str | None = Header(default=None),
) -> uuid.UUID:
    """Resolve the authenticated user id from `Authorization: Bearer`."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=401,
            detail={"code": InvalidTokenError.code, "message": "Missing token"},
        )
    token = authorization.split(" ", 1)[1].strip()
    try:
        return decode_access_token(token)
    except InvalidTokenError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


def require_reviewer(x_review_key: str | None = Header(default=None)) -> None:
    """Gate review decisions behind the configured reviewer key."""
    expected = get_settings().REVIEW_API_KEY
    if not expected or x_review_key != expected:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Reviewer key required"},
        )
