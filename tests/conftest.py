"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before each test and
dropped after it — no test data persists.
"""

import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["PIN_MAX_ATTEMPTS"] = "3"
os.environ["PIN_LOCKOUT_MINUTES"] = "0"
os.environ["REVIEW_API_KEY"] = "test-review-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from savings_ledger.main import app
from savings_ledger.models.base import Base, get_db
from savings_ledger.models.user import User
from savings_ledger.services.account_service import AccountService
from savings_ledger.services.credentials import CredentialVerifier
from savings_ledger.services.notifier import ChangeNotifier, get_notifier
from savings_ledger.services.tokens import create_access_token
from savings_ledger.services.transaction_service import TransactionService
from savings_ledger.schemas.account import AccountOpen


# SQLite keeps the tests free of any database infrastructure
TEST_DATABASE_URL = "sqlite:///./test.db"

PASSWORD = "correct-horse"
PIN = "1234"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def session_factory():
    """Hand out extra sessions, e.g. one per thread, and close them all."""
    sessions = []

    def make():
        session = TestSessionLocal()
        sessions.append(session)
        return session

    yield make
    for session in sessions:
        session.rollback()
        session.close()


@pytest.fixture
def verifier():
    return CredentialVerifier(rounds=4)


@pytest.fixture
def notifier():
    """A private notifier so published events never leak between tests."""
    return ChangeNotifier()


@pytest.fixture
def events(notifier, user):
    """Every message published to the test user's channel."""
    received = []
    notifier.subscribe(user.id, received.append)
    return received


def make_user(db_session, verifier, username="saver", pin=PIN):
    user = User(
        name="Test Saver",
        username=username,
        password_hash=verifier.hash(PASSWORD),
        pin_hash=verifier.hash(pin) if pin else None,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def user(db_session, verifier):
    return make_user(db_session, verifier)


@pytest.fixture
def account(db_session, user):
    account = AccountService(db_session).open_account(user.id, AccountOpen())
    db_session.commit()
    return account


@pytest.fixture
def tx_service(db_session, notifier, verifier):
    return TransactionService(db_session, notifier=notifier, verifier=verifier)


@pytest.fixture
def fund(tx_service, user):
    """Helper: put money into an account through a real deposit."""
    def _fund(account, amount):
        return tx_service.deposit(user.id, account.id, amount, PIN, "funding")
    return _fund


@pytest.fixture
def client(db_session, notifier):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
