"""
User service — registration, login and PIN setup.
"""

import uuid

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from savings_ledger.errors import InvalidCredentialError, UserExistsError
from savings_ledger.logging_config import get_logger
from savings_ledger.models.user import User
from savings_ledger.schemas.auth import UserRegister, UserResponse
from savings_ledger.services.attempt_limiter import PinAttemptLimiter
from savings_ledger.services.credentials import CredentialVerifier

logger = get_logger("users")


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        username=user.username,
        email=user.email,
        phone=user.phone,
        has_pin=user.pin_hash is not None,
        created_at=user.created_at,
    )


class UserService:

    def __init__(self, db: Session, verifier: CredentialVerifier | None = None):
        self.db = db
        self.verifier = verifier or CredentialVerifier()

    def _find(self, *identifiers: str | None) -> User | None:
        conditions = []
        for value in identifiers:
            if value:
                conditions.extend([
                    User.username == value,
                    User.email == value,
                    User.phone == value,
                ])
        if not conditions:
            return None
        return self.db.execute(
            select(User).where(or_(*conditions)).limit(1)
        ).scalar_one_or_none()

    def register(self, request: UserRegister) -> User:
        """Create a user. Any identifier already in use is rejected."""
        if self._find(request.username, request.email, request.phone):
            raise UserExistsError("User already exists with provided info")

        user = User(
            name=request.name,
            username=request.username,
            email=request.email,
            phone=request.phone,
            password_hash=self.verifier.hash(request.password),
        )
        self.db.add(user)
        self.db.flush()
        logger.info("User registered", extra={"user_id": str(user.id)})
        return user

    def authenticate(self, identifier: str, password: str) -> User:
        """Look a user up by username, email or phone and check the password."""
        user = self._find(identifier)
        if user is None or not self.verifier.verify(password, user.password_hash):
            raise InvalidCredentialError("Invalid credentials")
        return user

    def get_user(self, user_id: uuid.UUID) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise InvalidCredentialError(f"User {user_id} not found")
        return user

    def set_pin(self, user_id: uuid.UUID, password: str, pin: str) -> User:
        """
        Set or replace the user's PIN.

        Requires the account password. A successful change clears
        any PIN lockout. The change is committed here because the
        lockout reset commits on the same session.
        """
        user = self.get_user(user_id)
        if not self.verifier.verify(password, user.password_hash):
            raise InvalidCredentialError("Invalid credentials")

        user.pin_hash = self.verifier.hash(pin)
        self.db.commit()
        PinAttemptLimiter(self.db).reset(user_id)
        logger.info("PIN updated", extra={"user_id": str(user_id)})
        return user
