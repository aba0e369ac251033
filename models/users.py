"""
User Model
Each user owns one fuel log; FuelRecord rows are scoped by user_id.
"""
from extensions import db
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_login = db.Column(db.DateTime)

    # Lockout after MAX_LOGIN_ATTEMPTS consecutive failures
    failed_login_attempts = db.Column(db.Integer, default=0, nullable=False)
    locked_until = db.Column(db.DateTime)

    fuel_records = db.relationship(
        'FuelRecord', backref='owner', lazy=True, cascade='all, delete-orphan'
    )

    @classmethod
    def find_by_email(cls, email):
        """Case- and whitespace-insensitive lookup"""
        return cls.query.filter_by(email=(email or '').strip().lower()).first()

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def update_last_login(self):
        self.last_login = datetime.utcnow()
        db.session.commit()

    def is_locked(self):
        return bool(self.locked_until and self.locked_until > datetime.utcnow())

    def lockout_minutes_left(self):
        """Whole minutes until the lockout expires (0 when not locked)"""
        if not self.is_locked():
            return 0
        return int((self.locked_until - datetime.utcnow()).total_seconds() / 60) + 1

    def record_failed_login(self):
        """Count a failed attempt; lock the account once the limit is reached"""
        from flask import current_app
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1

        limit = current_app.config.get('MAX_LOGIN_ATTEMPTS', 5)
        duration = current_app.config.get('LOCKOUT_DURATION')
        if duration and self.failed_login_attempts >= limit:
            self.locked_until = datetime.utcnow() + duration

        db.session.commit()

    def reset_failed_logins(self):
        self.failed_login_attempts = 0
        self.locked_until = None
        db.session.commit()

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'email': self.email}

    def __repr__(self):
        return f'<User {self.email}>'
