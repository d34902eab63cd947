"""
Access tokens.

A signed JWT whose subject is the user id. Routes never trust a
user id from the request body; they take it from a verified
token.
"""

import uuid
from datetime import datetime, timedelta

from jose import JWTError, jwt

from savings_ledger.config import get_settings
from savings_ledger.errors import InvalidTokenError


def create_access_token(
    user_id: uuid.UUID, expires_minutes: int | None = None
) -> str:
    settings = get_settings()
    minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(user_id),
        "exp": datetime.utcnow() + timedelta(minutes=minutes),
    }
    return jwt.encode(
        payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> uuid.UUID:
    """Verify a token and return the user id it was issued for."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
        return uuid.UUID(payload["sub"])
    except (JWTError, KeyError, ValueError) as e:
        raise InvalidTokenError("Invalid or expired token") from e
