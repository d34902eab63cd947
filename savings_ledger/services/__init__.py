"""Business logic services."""

from savings_ledger.services.credentials import CredentialVerifier
from savings_ledger.services.attempt_limiter import (
    AttemptOutcome,
    AttemptResult,
    PinAttemptLimiter,
)
from savings_ledger.services.ledger_store import LedgerStore
from savings_ledger.services.notifier import ChangeEvent, ChangeNotifier
from savings_ledger.services.account_service import AccountService
from savings_ledger.services.transaction_service import TransactionService
from savings_ledger.services.user_service import UserService
from savings_ledger.services.withdrawal_request_service import (
    WithdrawalRequestService,
)

__all__ = [
    "CredentialVerifier",
    "AttemptOutcome",
    "AttemptResult",
    "PinAttemptLimiter",
    "LedgerStore",
    "ChangeEvent",
    "ChangeNotifier",
    "AccountService",
    "TransactionService",
    "UserService",
    "WithdrawalRequestService",
]
