"""
Account service — opening and listing savings accounts.

Balances are never set here. A new account starts at zero and
only ledger operations move it.
"""

import uuid

from sqlalchemy.orm import Session

from savings_ledger.models.account import Account
from savings_ledger.schemas.account import AccountOpen
from savings_ledger.services.ledger_store import LedgerStore


class AccountService:

    def __init__(self, db: Session):
        self.db = db
        self.store = LedgerStore(db)

    def open_account(self, user_id: uuid.UUID, request: AccountOpen) -> Account:
        """Open a new savings account for the user."""
        account = Account(
            user_id=user_id,
            phone=request.phone,
            balance=0,
            target_amount=request.target_amount,
            plan_type=request.plan_type,
            plan_note=request.plan_note,
            is_main=request.is_main,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def get_account(self, user_id: uuid.UUID, account_id: uuid.UUID) -> Account:
        return self.store.get_account(account_id, user_id=user_id)

    def list_accounts(self, user_id: uuid.UUID) -> list[Account]:
        """Get all accounts for a user."""
        return self.store.list_accounts(user_id)
