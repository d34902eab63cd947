"""
Tests for the UserService and access tokens.
"""

import uuid

import pytest
from jose import jwt

from savings_ledger.errors import (
    InvalidCredentialError,
    InvalidTokenError,
    TooManyAttemptsError,
    UserExistsError,
)
from savings_ledger.schemas.auth import UserRegister
from savings_ledger.services.tokens import (
    create_access_token,
    decode_access_token,
)
from savings_ledger.services.user_service import UserService

from conftest import PASSWORD


def register(service, username="newsaver", email=None, phone=None):
    return service.register(UserRegister(
        name="New Saver",
        username=username,
        email=email,
        phone=phone,
        password=PASSWORD,
    ))


class TestRegister:

    def test_password_is_hashed(self, db_session, verifier):
        user = register(UserService(db_session, verifier))
        db_session.commit()

        assert user.password_hash != PASSWORD
        assert verifier.verify(PASSWORD, user.password_hash)
        assert user.pin_hash is None

    def test_duplicate_identifier_rejected(self, db_session, verifier):
        service = UserService(db_session, verifier)
        register(service, username="a", email="same@test.com")
        db_session.commit()

        with pytest.raises(UserExistsError):
            register(service, username="b", email="same@test.com")

    def test_an_identifier_is_required(self):
        with pytest.raises(ValueError):
            UserRegister(name="Nobody", password=PASSWORD)


class TestAuthenticate:

    @pytest.mark.parametrize("identifier", ["newsaver", "n@test.com", "255700000001"])
    def test_login_by_any_identifier(self, db_session, verifier, identifier):
        service = UserService(db_session, verifier)
        user = register(service, email="n@test.com", phone="255700000001")
        db_session.commit()

        assert service.authenticate(identifier, PASSWORD).id == user.id

    def test_wrong_password(self, db_session, verifier):
        service = UserService(db_session, verifier)
        register(service)
        db_session.commit()

        with pytest.raises(InvalidCredentialError):
            service.authenticate("newsaver", "wrong-password")

    def test_unknown_user(self, db_session, verifier):
        with pytest.raises(InvalidCredentialError):
            UserService(db_session, verifier).authenticate("ghost", PASSWORD)


class TestSetPin:

    def test_set_pin_requires_password(self, db_session, verifier, user):
        with pytest.raises(InvalidCredentialError):
            UserService(db_session, verifier).set_pin(user.id, "nope", "5678")

    def test_new_pin_clears_lockout(
        self, db_session, verifier, tx_service, user, account
    ):
        for _ in range(3):
            with pytest.raises((InvalidCredentialError, TooManyAttemptsError)):
                tx_service.deposit(user.id, account.id, 100, "0000")

        UserService(db_session, verifier).set_pin(user.id, PASSWORD, "5678")

        txn = tx_service.deposit(user.id, account.id, 100, "5678")
        assert txn.amount == 100


class TestTokens:

    def test_round_trip(self):
        user_id = uuid.uuid4()
        assert decode_access_token(create_access_token(user_id)) == user_id

    def test_tampered_token_rejected(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, "wrong-secret", algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not.a.token")
