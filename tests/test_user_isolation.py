"""
Tests for per-user data isolation.

These are the most security-critical tests in the suite.  They verify that
user_query() and user_get() never leak one user's fuel log to another,
and that unauthenticated access yields zero rows.
"""
from datetime import date

import pytest
from werkzeug.exceptions import NotFound

from extensions import db
from models.fuel import FuelRecord
from utils.db_helpers import user_query, user_get, user_get_or_404


def _make_record(user_id, station='ENEOS'):
    r = FuelRecord(
        user_id=user_id, date=date(2024, 1, 1), amount=40, cost=6000, mileage=1000, station=station,
    )
    db.session.add(r)
    db.session.commit()
    return r


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestUserQueryIsolation:
    def test_query_returns_own_records_only(self, app, user, other_user, patch_user):
        _make_record(user.id, station='Mine')
        _make_record(other_user.id, station='Theirs')

        patch_user(user.id)
        stations = {r.station for r in user_query(FuelRecord).all()}

        assert 'Mine' in stations
        assert 'Theirs' not in stations, \
            "user_query must not return another user's records"

    def test_query_excludes_all_records_when_unauthenticated(self, app, user, patch_user):
        _make_record(user.id)

        patch_user(None)  # simulate no logged-in user
        results = user_query(FuelRecord).all()

        assert results == [], "Unauthenticated user must see zero records"


class TestUserGetIsolation:
    def test_returns_own_record(self, app, user, patch_user):
        record = _make_record(user.id)

        patch_user(user.id)
        result = user_get(FuelRecord, record.id)

        assert result is not None
        assert result.id == record.id

    def test_returns_none_for_other_users_record(self, app, user, other_user, patch_user):
        theirs = _make_record(other_user.id)

        patch_user(user.id)
        result = user_get(FuelRecord, theirs.id)

        assert result is None, \
            "user_get must return None when the record belongs to a different user"

    def test_returns_none_when_unauthenticated(self, app, user, patch_user):
        record = _make_record(user.id)

        patch_user(None)

        assert user_get(FuelRecord, record.id) is None

    def test_get_or_404_aborts_for_other_users_record(self, app, user, other_user, patch_user):
        theirs = _make_record(other_user.id)

        patch_user(user.id)

        with pytest.raises(NotFound):
            user_get_or_404(FuelRecord, theirs.id)
