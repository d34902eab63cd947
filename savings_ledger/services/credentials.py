"""
Credential verifier — one-way hashing for passwords and PINs.

bcrypt salts every hash and its work factor makes each guess
expensive. Both operations are pure: they touch no state and
only fail on input that cannot be a secret or a bcrypt hash.
"""

import bcrypt

from savings_ledger.config import get_settings
from savings_ledger.errors import InvalidInputError


class CredentialVerifier:

    def __init__(self, rounds: int | None = None):
        self.rounds = rounds or get_settings().BCRYPT_ROUNDS

    def hash(self, secret: str) -> str:
        """Return a salted bcrypt hash of the secret."""
        if not secret:
            raise InvalidInputError("Secret must not be empty")
        try:
            hashed = bcrypt.hashpw(
                secret.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)
            )
        except ValueError as e:
            raise InvalidInputError(f"Secret cannot be hashed: {e}") from e
        return hashed.decode("utf-8")

    def verify(self, secret: str, stored_hash: str) -> bool:
        """
        Check a secret against a stored hash.

        Returns False only for a well-formed secret that does not
        match. An empty secret or a value that is not a bcrypt
        hash raises InvalidInputError instead, so corrupted data
        is never mistaken for a wrong guess.
        """
        if not secret:
            raise InvalidInputError("Secret must not be empty")
        if not stored_hash:
            raise InvalidInputError("Stored hash must not be empty")
        try:
            return bcrypt.checkpw(
                secret.encode("utf-8"), stored_hash.encode("utf-8")
            )
        except ValueError as e:
            raise InvalidInputError(f"Malformed secret or hash: {e}") from e
