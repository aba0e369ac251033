"""
Tests for the User model: password hashing, login lockout and record ownership.
"""
from datetime import date, datetime, timedelta, timezone

from extensions import db
from models.fuel import FuelRecord


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHashing:
    def test_correct_password_accepted(self, app, user):
        assert user.check_password('TestPass1!') is True

    def test_wrong_password_rejected(self, app, user):
        assert user.check_password('WrongPass99!') is False

    def test_password_is_hashed(self, app, user):
        assert user.password_hash != 'TestPass1!', \
            "password_hash must store a hash, not the plain-text password"


# ---------------------------------------------------------------------------
# Login lockout
# ---------------------------------------------------------------------------

class TestLoginLockout:
    def test_account_not_locked_initially(self, app, user):
        assert user.is_locked() is False

    def test_lockout_applied_after_max_attempts(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts):
            user.record_failed_login()

        assert user.is_locked() is True
        assert user.locked_until is not None

    def test_failed_attempts_below_threshold_do_not_lock(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts - 1):
            user.record_failed_login()

        assert user.is_locked() is False

    def test_reset_clears_lockout(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts):
            user.record_failed_login()

        user.reset_failed_logins()

        assert user.is_locked() is False
        assert user.failed_login_attempts == 0
        assert user.locked_until is None

    def test_expired_lockout_is_not_locked(self, app, user):
        """A locked_until timestamp in the past should not count as locked."""
        user.locked_until = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=1)
        db.session.commit()

        assert user.is_locked() is False


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------

class TestFuelRecordOwnership:
    def test_deleting_user_removes_their_records(self, app, user):
        db.session.add(FuelRecord(
            user_id=user.id, date=date(2024, 1, 1), amount=40, cost=6000, mileage=1000, station='ENEOS',
        ))
        db.session.commit()

        db.session.delete(user)
        db.session.commit()

        assert FuelRecord.query.count() == 0

    def test_price_per_liter_property(self, app, make_record):
        assert make_record('2024-01-01', 40, 6000, 1000).price_per_liter == 150
