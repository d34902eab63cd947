"""
Ledger store — accounts, balances, and the transaction log.

This is the only code that writes to the accounts and
transactions tables. It enforces the storage-level rules:
1. Transactions are append-only
2. A balance only moves through adjust_balance()
3. adjust_balance() never lets a balance go negative

The store takes a database session as a constructor argument.
The caller controls the transaction boundary.
"""

import uuid

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from savings_ledger.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    TransactionNotFoundError,
)
from savings_ledger.models.account import Account
from savings_ledger.models.enums import TransactionType, TransactionStatus
from savings_ledger.models.transaction import Transaction


class LedgerStore:

    def __init__(self, db: Session):
        self.db = db

    def get_account(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID | None = None,
        for_update: bool = False,
    ) -> Account:
        """
        Load an account, optionally scoped to its owner.

        An account owned by someone else is reported exactly like
        a missing one. for_update takes a row lock on databases
        that support it.
        """
        stmt = (
            select(Account)
            .where(Account.id == account_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        account = self.db.execute(stmt).scalar_one_or_none()
        if account is None or (user_id is not None and account.user_id != user_id):
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def list_accounts(self, user_id: uuid.UUID) -> list[Account]:
        """Return a user's accounts, oldest first."""
        accounts = self.db.execute(
            select(Account)
            .where(Account.user_id == user_id)
            .order_by(Account.created_at)
            .execution_options(populate_existing=True)
        ).scalars().all()
        return list(accounts)

    def append_transaction(
        self,
        account_id: uuid.UUID,
        kind: TransactionType,
        amount: int,
        note: str | None = None,
    ) -> Transaction:
        """Insert a new transaction row. Existing rows are never touched."""
        if amount <= 0:
            raise InvalidAmountError(f"Amount must be positive, got {amount}")

        txn = Transaction(
            id=uuid.uuid4(),
            account_id=account_id,
            transaction_type=kind,
            amount=amount,
            note=note,
            status=TransactionStatus.COMPLETED,
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def adjust_balance(self, account_id: uuid.UUID, delta: int) -> int:
        """
        Add delta to an account balance and return the new balance.

        The sufficiency check and the write are one conditional
        UPDATE, so the database evaluates both against the current
        row. Two concurrent withdrawals on the same account queue
        on the row lock and the second sees the first one's result.
        Operations on different accounts never wait for each other.
        """
        new_balance = self.db.execute(
            update(Account)
            .where(Account.id == account_id, Account.balance + delta >= 0)
            .values(balance=Account.balance + delta)
            .returning(Account.balance)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()

        if new_balance is not None:
            return new_balance

        current = self.db.execute(
            select(Account.balance).where(Account.id == account_id)
        ).scalar_one_or_none()
        if current is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        raise InsufficientFundsError(available=current, requested=-delta)

    def get_transaction(self, transaction_id: uuid.UUID) -> Transaction:
        txn = self.db.get(Transaction, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(
                f"Transaction {transaction_id} not found"
            )
        return txn

    def list_transactions(self, account_id: uuid.UUID) -> list[Transaction]:
        """Return all transactions for an account, newest first."""
        transactions = self.db.execute(
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.created_at.desc())
        ).scalars().all()
        return list(transactions)

    def balance_from_log(self, account_id: uuid.UUID) -> int:
        """Recompute a balance from the transaction log."""
        total = 0
        for txn in self.list_transactions(account_id):
            if txn.transaction_type == TransactionType.DEPOSIT:
                total += txn.amount
            else:
                total -= txn.amount
        return total
