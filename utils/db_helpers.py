"""
Database query helpers for per-user record scoping.

Every fuel record belongs to exactly one User.  Every query against a
user-owned model should go through these helpers so that one user can
never see another user's records.

Usage
-----
In any blueprint route or service function::

    from utils.db_helpers import user_query, user_get_or_404, get_user_id

    # List all fuel records belonging to the current user
    records = user_query(FuelRecord).order_by(FuelRecord.date).all()

    # Fetch a single record safely (raises 404 if not found *or* wrong user)
    record = user_get_or_404(FuelRecord, record_id)

    # Supply user_id when creating a new record
    rec = FuelRecord(station='ENEOS', user_id=get_user_id(), ...)
"""

from flask_login import current_user


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------

def get_user_id():
    """Return ``current_user.id``, or ``None`` if not authenticated."""
    if current_user and current_user.is_authenticated:
        return current_user.id
    return None


def user_query(model):
    """Return a SQLAlchemy query pre-filtered to the current user.

    Examples::

        user_query(FuelRecord).all()
        user_query(FuelRecord).filter(FuelRecord.date >= start).count()
    """
    if not hasattr(model, 'user_id'):
        raise AttributeError(
            f"user_query() called on {model.__name__} but it has no user_id column."
        )
    uid = get_user_id()
    if uid is None:
        # Return a query that always yields zero rows rather than leaking data
        return model.query.filter(model.id == -1)
    return model.query.filter_by(user_id=uid)


def user_get(model, record_id):
    """Fetch a single record by *record_id*, scoped to the current user.

    Returns ``None`` if the record does not exist or belongs to another user.
    """
    uid = get_user_id()
    if uid is None:
        return None
    return model.query.filter_by(id=record_id, user_id=uid).first()


def user_get_or_404(model, record_id):
    """Like ``user_get`` but aborts with 404 if nothing is found."""
    uid = get_user_id()
    if uid is None:
        from flask import abort
        abort(404)
    return model.query.filter_by(id=record_id, user_id=uid).first_or_404()


def set_user_id(obj):
    """Set ``obj.user_id = get_user_id()`` in-place and return *obj*."""
    obj.user_id = get_user_id()
    return obj
