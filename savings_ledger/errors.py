"""
Error types raised by the services.

Every error carries a stable `code` so API clients can branch on
the kind of failure without parsing the message, and an HTTP
status the routers use when translating it into a response.
"""


class SavingsError(Exception):
    """Base class for all expected business failures."""

    code = "error"
    status_code = 400

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.details}


class InvalidInputError(SavingsError):
    code = "invalid_input"


class InvalidAmountError(SavingsError):
    code = "invalid_amount"


class PinNotSetError(SavingsError):
    code = "pin_not_set"


class InvalidCredentialError(SavingsError):
    code = "invalid_credential"
    status_code = 401

    def __init__(self, message: str, remaining_attempts: int | None = None):
        if remaining_attempts is None:
            super().__init__(message)
        else:
            super().__init__(message, remaining_attempts=remaining_attempts)
        self.remaining_attempts = remaining_attempts


class TooManyAttemptsError(SavingsError):
    code = "too_many_attempts"
    status_code = 423

    def __init__(self, message: str, max_attempts: int):
        super().__init__(message, max_attempts=max_attempts, locked_out=True)
        self.max_attempts = max_attempts
        self.locked_out = True


class AccountNotFoundError(SavingsError):
    code = "account_not_found"
    status_code = 404


class InsufficientFundsError(SavingsError):
    code = "insufficient_funds"

    def __init__(self, available: int, requested: int):
        super().__init__(
            f"Insufficient balance: available={available}, "
            f"requested={requested}",
            available=available,
            requested=requested,
        )
        self.available = available
        self.requested = requested


class StoreUnavailableError(SavingsError):
    code = "store_unavailable"
    status_code = 503


class UserExistsError(SavingsError):
    code = "user_exists"
    status_code = 409


class InvalidTokenError(SavingsError):
    code = "invalid_token"
    status_code = 401


class TransactionNotFoundError(SavingsError):
    code = "transaction_not_found"
    status_code = 404


class WithdrawalRequestNotFoundError(SavingsError):
    code = "withdrawal_request_not_found"
    status_code = 404


class InvalidWithdrawalRequestError(SavingsError):
    code = "invalid_withdrawal_request"
