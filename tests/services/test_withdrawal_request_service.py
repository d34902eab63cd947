"""
Tests for the WithdrawalRequestService.
"""

import uuid

import pytest

from savings_ledger.errors import (
    InvalidWithdrawalRequestError,
    TransactionNotFoundError,
    WithdrawalRequestNotFoundError,
)
from savings_ledger.models.enums import WithdrawalRequestStatus
from savings_ledger.schemas.withdrawal_request import WithdrawalRequestCreate
from savings_ledger.services.withdrawal_request_service import (
    WithdrawalRequestService,
)

from conftest import PIN, make_user


@pytest.fixture
def withdrawal(tx_service, user, account, fund):
    fund(account, 1000)
    return tx_service.withdraw(user.id, account.id, 400, PIN, "school fees")


@pytest.fixture
def service(db_session, notifier):
    return WithdrawalRequestService(db_session, notifier=notifier)


def file_request(service, user, transaction_id, reason="Tuition"):
    return service.create(user.id, WithdrawalRequestCreate(
        transaction_id=transaction_id,
        reason=reason,
        document_url="https://example.com/invoice.pdf",
    ))


class TestCreate:

    def test_create_pending_request(self, service, user, withdrawal, events):
        events.clear()

        request = file_request(service, user, withdrawal.id)

        assert request.status == WithdrawalRequestStatus.PENDING
        assert request.transaction_id == withdrawal.id
        assert request.decided_at is None
        assert len(events) == 1
        assert events[0]["event"] == "withdrawalRequestChanged"
        assert events[0]["data"]["request"]["status"] == "pending"

    def test_deposit_cannot_be_reviewed(self, service, user, account, fund):
        deposit = fund(account, 100)
        with pytest.raises(InvalidWithdrawalRequestError):
            file_request(service, user, deposit.id)

    def test_unknown_transaction(self, service, user):
        with pytest.raises(TransactionNotFoundError):
            file_request(service, user, uuid.uuid4())

    def test_other_users_transaction(
        self, db_session, service, verifier, withdrawal
    ):
        stranger = make_user(db_session, verifier, username="stranger")
        with pytest.raises(TransactionNotFoundError):
            file_request(service, stranger, withdrawal.id)

    def test_list_for_user(self, service, user, withdrawal):
        file_request(service, user, withdrawal.id, reason="first")
        file_request(service, user, withdrawal.id, reason="second")

        requests = service.list_for_user(user.id)

        assert {r.reason for r in requests} == {"first", "second"}


class TestDecide:

    def test_approve(self, service, user, withdrawal, events):
        request = file_request(service, user, withdrawal.id)
        events.clear()

        decided = service.decide(request.id, WithdrawalRequestStatus.APPROVED)

        assert decided.status == WithdrawalRequestStatus.APPROVED
        assert decided.decided_at is not None
        assert events[0]["data"]["request"]["status"] == "approved"

    def test_decision_is_final(self, service, user, withdrawal):
        request = file_request(service, user, withdrawal.id)
        service.decide(request.id, WithdrawalRequestStatus.REJECTED)

        with pytest.raises(InvalidWithdrawalRequestError, match="Cannot transition"):
            service.decide(request.id, WithdrawalRequestStatus.APPROVED)

    def test_cannot_move_back_to_pending(self, service, user, withdrawal):
        request = file_request(service, user, withdrawal.id)
        with pytest.raises(InvalidWithdrawalRequestError):
            service.decide(request.id, WithdrawalRequestStatus.PENDING)

    def test_unknown_request(self, service):
        with pytest.raises(WithdrawalRequestNotFoundError):
            service.decide(uuid.uuid4(), WithdrawalRequestStatus.APPROVED)
