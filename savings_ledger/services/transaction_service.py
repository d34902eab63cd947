"""
Transaction service — PIN-gated deposits and withdrawals.

Each operation:
1. Validates the amount
2. Authorizes the caller's PIN through the attempt limiter
3. Checks the account (exists, owned by the caller, funded)
4. Appends the transaction and moves the balance in one unit
5. Publishes the change after commit

A failure at any step is final for the request. Nothing is
retried, and nothing written in step 4 survives a failure
inside step 4.
"""

import uuid

from sqlalchemy.orm import Session

from savings_ledger.errors import (
    InsufficientFundsError,
    InvalidAmountError,
    InvalidCredentialError,
    InvalidTokenError,
    PinNotSetError,
    SavingsError,
    TooManyAttemptsError,
)
from savings_ledger.logging_config import get_logger
from savings_ledger.models.base import unit_of_work
from savings_ledger.models.enums import TransactionType
from savings_ledger.models.transaction import Transaction
from savings_ledger.models.user import User
from savings_ledger.schemas.account import AccountResponse
from savings_ledger.schemas.transaction import TransactionResponse
from savings_ledger.services.attempt_limiter import (
    AttemptOutcome,
    PinAttemptLimiter,
)
from savings_ledger.services.credentials import CredentialVerifier
from savings_ledger.services.ledger_store import LedgerStore
from savings_ledger.services.notifier import (
    ChangeEvent,
    ChangeNotifier,
    get_notifier,
)

logger = get_logger("transactions")


class TransactionService:

    def __init__(
        self,
        db: Session,
        notifier: ChangeNotifier | None = None,
        verifier: CredentialVerifier | None = None,
        limiter: PinAttemptLimiter | None = None,
    ):
        self.db = db
        self.store = LedgerStore(db)
        self.notifier = notifier or get_notifier()
        self.verifier = verifier or CredentialVerifier()
        self.limiter = limiter or PinAttemptLimiter(db)

    def _authorize(self, user_id: uuid.UUID, pin: str) -> None:
        """
        Verify the caller's PIN or raise.

        The limiter refuses a locked-out user before the PIN is
        checked, so a correct guess made during a lockout does not
        lift it.
        """
        user = self.db.get(User, user_id)
        if user is None:
            raise InvalidTokenError(f"User {user_id} not found")
        if not user.pin_hash:
            raise PinNotSetError("User PIN not set")

        result = self.limiter.attempt(
            user_id, lambda: self.verifier.verify(pin, user.pin_hash)
        )

        if result.outcome is AttemptOutcome.LOCKED_OUT:
            raise TooManyAttemptsError(
                "Too many wrong attempts", max_attempts=result.max_attempts
            )
        if result.outcome is AttemptOutcome.INVALID:
            raise InvalidCredentialError(
                f"Invalid PIN. Attempts left: {result.remaining_attempts}",
                remaining_attempts=result.remaining_attempts,
            )

    def _apply(
        self,
        user_id: uuid.UUID,
        account_id: uuid.UUID,
        kind: TransactionType,
        amount: int,
        note: str | None,
    ) -> Transaction:
        """Append the transaction and move the balance as one unit."""
        delta = amount if kind == TransactionType.DEPOSIT else -amount

        with unit_of_work(self.db):
            self.store.get_account(account_id, user_id=user_id, for_update=True)
            txn = self.store.append_transaction(account_id, kind, amount, note)
            new_balance = self.store.adjust_balance(account_id, delta)

        logger.info(
            "%s of %s committed, balance now %s",
            kind.value, amount, new_balance,
            extra={
                "user_id": str(user_id),
                "account_id": str(account_id),
                "transaction_id": str(txn.id),
            },
        )
        return txn

    def _publish_changes(self, user_id: uuid.UUID, txn: Transaction) -> None:
        """
        Push the committed change to the user's channel.

        Runs after commit. Any failure while building the snapshot
        is logged and the operation still succeeds.
        """
        try:
            accounts = [
                AccountResponse.model_validate(a).model_dump(mode="json")
                for a in self.store.list_accounts(user_id)
            ]
            transaction = TransactionResponse.model_validate(txn).model_dump(
                mode="json"
            )
        except Exception:
            logger.exception(
                "Could not build change notification",
                extra={"user_id": str(user_id), "transaction_id": str(txn.id)},
            )
            return

        self.notifier.publish(
            user_id,
            ChangeEvent.ACCOUNTS_CHANGED,
            {"user_id": str(user_id), "accounts": accounts},
        )
        self.notifier.publish(
            user_id,
            ChangeEvent.TRANSACTION_CREATED,
            {"account_id": str(txn.account_id), "transaction": transaction},
        )

    def _run(
        self,
        user_id: uuid.UUID,
        account_id: uuid.UUID,
        kind: TransactionType,
        amount: int,
        pin: str,
        note: str | None,
    ) -> Transaction:
        try:
            if amount <= 0:
                raise InvalidAmountError(
                    f"Amount must be positive, got {amount}"
                )

            self._authorize(user_id, pin)

            if kind == TransactionType.WITHDRAWAL:
                # Early answer for the common case; adjust_balance
                # repeats the check against the locked row.
                account = self.store.get_account(account_id, user_id=user_id)
                if account.balance < amount:
                    raise InsufficientFundsError(
                        available=account.balance, requested=amount
                    )

            txn = self._apply(user_id, account_id, kind, amount, note)
        except SavingsError as e:
            logger.warning(
                "%s rejected: %s", kind.value, e.message,
                extra={
                    "user_id": str(user_id),
                    "account_id": str(account_id),
                    "code": e.code,
                },
            )
            raise

        self._publish_changes(user_id, txn)
        return txn

    def deposit(
        self,
        user_id: uuid.UUID,
        account_id: uuid.UUID,
        amount: int,
        pin: str,
        note: str | None = None,
    ) -> Transaction:
        """Add funds to one of the caller's accounts."""
        return self._run(
            user_id, account_id, TransactionType.DEPOSIT, amount, pin, note
        )

    def withdraw(
        self,
        user_id: uuid.UUID,
        account_id: uuid.UUID,
        amount: int,
        pin: str,
        note: str | None = None,
    ) -> Transaction:
        """
        Take funds out of one of the caller's accounts.

        Refused with InsufficientFundsError when the balance cannot
        cover the amount, including when a concurrent withdrawal
        used it up between the early check and the write.
        """
        return self._run(
            user_id, account_id, TransactionType.WITHDRAWAL, amount, pin, note
        )

    def list_transactions(
        self, user_id: uuid.UUID, account_id: uuid.UUID
    ) -> list[Transaction]:
        """Transaction history for one of the caller's accounts."""
        self.store.get_account(account_id, user_id=user_id)
        return self.store.list_transactions(account_id)
