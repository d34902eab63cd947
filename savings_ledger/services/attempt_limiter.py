"""
PIN attempt limiter.

Counts consecutive failed PIN verifications per user and locks
the user out once the count reaches the configured maximum.
The counter lives in the pin_attempts table so a lockout
survives restarts and is shared by every server process.

Each verification runs under a lock on the user's counter row, so
concurrent guesses cannot all slip in below the threshold.

Results are returned as AttemptResult values. Turning them into
errors is the caller's decision.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from savings_ledger.config import get_settings
from savings_ledger.logging_config import get_logger
from savings_ledger.models.pin_attempt import PinAttempt

logger = get_logger("attempt_limiter")


class AttemptOutcome(str, enum.Enum):
    OK = "ok"
    INVALID = "invalid"
    LOCKED_OUT = "locked_out"


@dataclass(frozen=True)
class AttemptResult:
    outcome: AttemptOutcome
    failures: int
    max_attempts: int

    @property
    def remaining_attempts(self) -> int:
        return max(self.max_attempts - self.failures, 0)

    @property
    def ok(self) -> bool:
        return self.outcome is AttemptOutcome.OK


class PinAttemptLimiter:
    """
    Per-user failure counter with a fixed threshold.

    Every write commits immediately on the session it was given.
    A failed attempt must stay recorded even though the request
    that made it is about to fail, so the limiter has to run
    before the caller starts any writes of its own.
    """

    def __init__(
        self,
        db: Session,
        max_attempts: int | None = None,
        lockout_minutes: int | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.max_attempts = max_attempts or settings.PIN_MAX_ATTEMPTS
        self.lockout_minutes = (
            settings.PIN_LOCKOUT_MINUTES
            if lockout_minutes is None else lockout_minutes
        )

    def _expired(self, counter: PinAttempt, now: datetime) -> bool:
        if not self.lockout_minutes or counter.last_attempt is None:
            return False
        return counter.last_attempt <= now - timedelta(minutes=self.lockout_minutes)

    def _failures(self, user_id: uuid.UUID) -> int:
        counter = self.db.get(PinAttempt, user_id, populate_existing=True)
        if counter is None or self._expired(counter, datetime.utcnow()):
            return 0
        return counter.count

    def _result(self, failures: int) -> AttemptResult:
        if failures >= self.max_attempts:
            outcome = AttemptOutcome.LOCKED_OUT
        else:
            outcome = AttemptOutcome.INVALID
        return AttemptResult(outcome, failures, self.max_attempts)

    def check(self, user_id: uuid.UUID) -> AttemptResult:
        """Report whether the user is locked out, recording nothing."""
        failures = self._failures(user_id)
        if failures >= self.max_attempts:
            return AttemptResult(
                AttemptOutcome.LOCKED_OUT, failures, self.max_attempts
            )
        return AttemptResult(AttemptOutcome.OK, failures, self.max_attempts)

    def attempt(
        self, user_id: uuid.UUID, verify: Callable[[], bool]
    ) -> AttemptResult:
        """
        Run one PIN verification under the user's counter lock.

        The counter row stays locked from the lockout check until
        the outcome is recorded, so concurrent attempts for one
        user are judged one at a time. A locked-out user is refused
        without calling verify, so a correct PIN cannot lift or slip
        past a lockout. If verify raises, nothing is recorded and
        the error propagates.
        """
        self._ensure_counter(user_id)
        try:
            failures = self._lock_counter(user_id)
            if failures >= self.max_attempts:
                self.db.commit()
                return AttemptResult(
                    AttemptOutcome.LOCKED_OUT, failures, self.max_attempts
                )

            if verify():
                self._set_count(user_id, 0)
                self.db.commit()
                return AttemptResult(AttemptOutcome.OK, 0, self.max_attempts)

            failures = self._increment(user_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        result = self._result(failures)
        logger.warning(
            "PIN verification failed (%s/%s)", failures, self.max_attempts,
            extra={"user_id": str(user_id), "code": result.outcome.value},
        )
        return result

    def record_result(self, user_id: uuid.UUID, success: bool) -> AttemptResult:
        """Record one verification outcome and return the new state."""
        return self.attempt(user_id, lambda: success)

    def reset(self, user_id: uuid.UUID) -> None:
        """Clear the failure count, lifting any lockout."""
        self.db.execute(
            update(PinAttempt)
            .where(PinAttempt.user_id == user_id, PinAttempt.count != 0)
            .values(count=0)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def _ensure_counter(self, user_id: uuid.UUID) -> None:
        if self.db.get(PinAttempt, user_id) is not None:
            return
        self.db.add(PinAttempt(user_id=user_id, count=0))
        try:
            self.db.flush()
        except IntegrityError:
            # Another request created the row first
            self.db.rollback()

    def _lock_counter(self, user_id: uuid.UUID) -> int:
        """
        Lock the counter row and return the current failure count.

        The no-op UPDATE takes the row lock on PostgreSQL and the
        database write lock on SQLite. Either is held until the
        caller commits. A streak older than the lockout window is
        cleared here.
        """
        self.db.execute(
            update(PinAttempt)
            .where(PinAttempt.user_id == user_id)
            .values(count=PinAttempt.count)
            .execution_options(synchronize_session=False)
        )
        if self.lockout_minutes:
            cutoff = datetime.utcnow() - timedelta(minutes=self.lockout_minutes)
            self.db.execute(
                update(PinAttempt)
                .where(
                    PinAttempt.user_id == user_id,
                    PinAttempt.last_attempt <= cutoff,
                )
                .values(count=0)
                .execution_options(synchronize_session=False)
            )
        return self.db.execute(
            select(PinAttempt.count).where(PinAttempt.user_id == user_id)
        ).scalar_one()

    def _set_count(self, user_id: uuid.UUID, count: int) -> None:
        self.db.execute(
            update(PinAttempt)
            .where(PinAttempt.user_id == user_id)
            .values(count=count)
            .execution_options(synchronize_session=False)
        )

    def _increment(self, user_id: uuid.UUID) -> int:
        """Increment the locked counter and return the new count."""
        self.db.execute(
            update(PinAttempt)
            .where(PinAttempt.user_id == user_id)
            .values(count=PinAttempt.count + 1, last_attempt=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(
            select(PinAttempt.count).where(PinAttempt.user_id == user_id)
        ).scalar_one()
