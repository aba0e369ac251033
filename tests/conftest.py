"""
Shared pytest fixtures for the Fuel Log test suite.

All tests run against an in-memory SQLite database (TestingConfig).
A single app context is pushed for the whole session so that SQLAlchemy
objects remain attached throughout.  After each test, clean_db wipes all
rows so tests are fully independent.

The statistics services are pure, so most of their tests build unsaved
FuelRecord instances with ``make_record`` and never touch the session.
"""
from datetime import date

import pytest
from app import create_app
from extensions import db as _db


# ---------------------------------------------------------------------------
# Application / database lifecycle
# ---------------------------------------------------------------------------

@pytest.fixture(scope='session')
def app():
    """Create a test Flask application with an in-memory SQLite database."""
    application = create_app('testing')
    ctx = application.app_context()
    ctx.push()
    _db.create_all()
    yield application
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture(autouse=True)
def clean_db(app):
    """Wipe every table after each test so tests never share state."""
    yield
    _db.session.rollback()
    for table in reversed(_db.metadata.sorted_tables):
        _db.session.execute(table.delete())
    _db.session.commit()
    _db.session.expunge_all()


# ---------------------------------------------------------------------------
# Common model helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def make_record():
    """Factory for unsaved FuelRecord rows; *day* is an ISO string."""
    from models.fuel import FuelRecord

    def _make(day, amount, cost, mileage, station='ENEOS', **kwargs):
        return FuelRecord(
            date=date.fromisoformat(day),
            amount=amount,
            cost=cost,
            mileage=mileage,
            station=station,
            **kwargs
        )
    return _make


@pytest.fixture
def user(app):
    from models.users import User
    u = User(email='driver@example.com', name='Test Driver')
    u.set_password('TestPass1!')
    _db.session.add(u)
    _db.session.commit()
    return u


@pytest.fixture
def other_user(app):
    from models.users import User
    u = User(email='other@example.com', name='Other Driver')
    u.set_password('TestPass1!')
    _db.session.add(u)
    _db.session.commit()
    return u


@pytest.fixture
def patch_user(monkeypatch):
    """Return a helper that points get_user_id() at a given user id."""
    def _set(user_id):
        monkeypatch.setattr('utils.db_helpers.get_user_id', lambda: user_id)
        monkeypatch.setattr('services.fuel_record_service.get_user_id', lambda: user_id)
    return _set


@pytest.fixture
def client(app):
    """Test client.  Requests reuse the session app context, so the values
    Flask-Login and Flask-WTF cache on g are cleared around each test."""
    from flask import g

    def _reset():
        for name in ('_login_user', 'csrf_token', 'csrf_valid'):
            g.pop(name, None)

    _reset()
    yield app.test_client()
    _reset()


@pytest.fixture
def logged_in_client(client, user):
    response = client.post('/auth/login', data={
        'email': 'driver@example.com',
        'password': 'TestPass1!',
    })
    assert response.status_code == 200
    yield client
    client.get('/auth/logout')
