"""
Tests for the PinAttemptLimiter.
"""

import threading
from datetime import datetime, timedelta

import pytest
from sqlalchemy import update

from savings_ledger.errors import InvalidInputError
from savings_ledger.models.pin_attempt import PinAttempt
from savings_ledger.services.attempt_limiter import (
    AttemptOutcome,
    PinAttemptLimiter,
)


class TestRecordResult:

    def test_no_counter_before_first_failure(self, db_session, user):
        limiter = PinAttemptLimiter(db_session, max_attempts=3)

        result = limiter.check(user.id)

        assert result.outcome is AttemptOutcome.OK
        assert db_session.get(PinAttempt, user.id) is None

    def test_failures_count_down_then_lock(self, db_session, user):
        limiter = PinAttemptLimiter(db_session, max_attempts=3)

        first = limiter.record_result(user.id, False)
        second = limiter.record_result(user.id, False)
        third = limiter.record_result(user.id, False)

        assert first.outcome is AttemptOutcome.INVALID
        assert first.remaining_attempts == 2
        assert second.outcome is AttemptOutcome.INVALID
        assert second.remaining_attempts == 1
        assert third.outcome is AttemptOutcome.LOCKED_OUT
        assert third.max_attempts == 3

    def test_success_resets_counter(self, db_session, user):
        limiter = PinAttemptLimiter(db_session, max_attempts=3)
        limiter.record_result(user.id, False)
        limiter.record_result(user.id, False)

        result = limiter.record_result(user.id, True)

        assert result.ok
        assert db_session.get(PinAttempt, user.id, populate_existing=True).count == 0
        assert limiter.record_result(user.id, False).remaining_attempts == 2

    def test_lockout_persists_across_limiter_instances(self, db_session, user):
        for _ in range(3):
            PinAttemptLimiter(db_session, max_attempts=3).record_result(user.id, False)

        result = PinAttemptLimiter(db_session, max_attempts=3).check(user.id)

        assert result.outcome is AttemptOutcome.LOCKED_OUT

    def test_reset_lifts_lockout(self, db_session, user):
        limiter = PinAttemptLimiter(db_session, max_attempts=3)
        for _ in range(3):
            limiter.record_result(user.id, False)

        limiter.reset(user.id)

        assert limiter.check(user.id).outcome is AttemptOutcome.OK


class TestAttempt:

    def test_locked_out_user_is_never_verified(self, db_session, user):
        limiter = PinAttemptLimiter(db_session, max_attempts=3)
        for _ in range(3):
            limiter.record_result(user.id, False)
        calls = []

        def verify():
            calls.append(1)
            return True

        result = limiter.attempt(user.id, verify)

        assert result.outcome is AttemptOutcome.LOCKED_OUT
        assert calls == []

    def test_verify_error_records_nothing(self, db_session, user):
        limiter = PinAttemptLimiter(db_session, max_attempts=3)
        limiter.record_result(user.id, False)

        def verify():
            raise InvalidInputError("Malformed secret or hash")

        with pytest.raises(InvalidInputError):
            limiter.attempt(user.id, verify)

        assert limiter.check(user.id).failures == 1


class TestLockoutExpiry:

    def _age_counter(self, db_session, user_id, minutes):
        db_session.execute(
            update(PinAttempt)
            .where(PinAttempt.user_id == user_id)
            .values(last_attempt=datetime.utcnow() - timedelta(minutes=minutes))
        )
        db_session.commit()

    def test_lockout_never_expires_by_default(self, db_session, user):
        limiter = PinAttemptLimiter(db_session, max_attempts=3, lockout_minutes=0)
        for _ in range(3):
            limiter.record_result(user.id, False)
        self._age_counter(db_session, user.id, minutes=60 * 24 * 30)

        assert limiter.check(user.id).outcome is AttemptOutcome.LOCKED_OUT

    def test_lockout_expires_after_window(self, db_session, user):
        limiter = PinAttemptLimiter(db_session, max_attempts=3, lockout_minutes=15)
        for _ in range(3):
            limiter.record_result(user.id, False)
        self._age_counter(db_session, user.id, minutes=16)

        assert limiter.check(user.id).outcome is AttemptOutcome.OK
        # The stale streak does not carry into the next failure
        assert limiter.record_result(user.id, False).remaining_attempts == 2


class TestConcurrentFailures:

    def test_concurrent_failures_are_all_counted(self, session_factory, user):
        """No increment is lost when failures race for one user."""
        attempts = 5
        barrier = threading.Barrier(attempts)
        results = []
        errors = []

        def fail_once():
            limiter = PinAttemptLimiter(session_factory(), max_attempts=10)
            barrier.wait()
            try:
                results.append(limiter.record_result(user.id, False).failures)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=fail_once) for _ in range(attempts)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(results) == [1, 2, 3, 4, 5]
