"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db(), and every ledger mutation runs inside
unit_of_work().
"""

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase

from savings_ledger.config import get_settings
from savings_ledger.errors import StoreUnavailableError

settings = get_settings()

# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# --- Session Factory ---
# autocommit=False means we explicitly control when changes
# are saved. A deposit writes a transaction row and a balance
# update; both must land or neither.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, preventing connection leaks.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """
    Run a block of writes as one commit-or-rollback unit.

    Everything flushed inside the block is committed when it
    exits normally. Any exception rolls the whole block back.
    Driver and connection failures surface as
    StoreUnavailableError so callers see one error kind for
    "the database could not take this write".
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreUnavailableError(f"Ledger store unavailable: {e}") from e
    except Exception:
        db.rollback()
        raise
