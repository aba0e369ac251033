"""
Authentication Routes
Login, logout and registration; responses are JSON.
"""
from flask import jsonify, current_app
from flask_login import login_user, logout_user, current_user
from flask_wtf.csrf import generate_csrf
from . import auth_bp
from .forms import LoginForm, RegisterForm, validate_password_strength, form_errors
from models.users import User
from extensions import db, limiter


@auth_bp.route('/csrf')
def csrf_token():
    """CSRF token for API clients; send it back in the X-CSRFToken header"""
    return jsonify({'csrf_token': generate_csrf()})


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("5 per minute")
def register():
    """Create an account and log it in"""
    form = RegisterForm()
    if not form.validate_on_submit():
        return jsonify({'success': False, 'errors': form_errors(form)}), 400

    is_strong, message = validate_password_strength(form.password.data)
    if not is_strong:
        return jsonify({'success': False, 'errors': [message]}), 400

    email = form.email.data.strip().lower()
    if User.find_by_email(email):
        return jsonify({'success': False, 'errors': ['An account with this email already exists']}), 400

    user = User(email=email, name=form.name.data.strip(), is_active=True)
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f'New account registered: {user.id}')

    login_user(user)
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")  # Rate limit login attempts
def login():
    """User login with lockout after repeated failures"""
    if current_user.is_authenticated:
        return jsonify({'success': True, 'user': current_user.to_dict()})

    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({'success': False, 'errors': form_errors(form)}), 400

    user = User.find_by_email(form.email.data)

    if user is None:
        # Generic error to prevent user enumeration
        return jsonify({'success': False, 'errors': ['Invalid email or password.']}), 401

    if user.is_locked():
        return jsonify({
            'success': False,
            'errors': [f'Account temporarily locked. Try again in {user.lockout_minutes_left()} minutes.']
        }), 403

    if not user.is_active:
        return jsonify({'success': False, 'errors': ['This account has been deactivated.']}), 403

    if not user.check_password(form.password.data):
        user.record_failed_login()
        current_app.logger.warning(f'Failed login for user {user.id}')
        return jsonify({'success': False, 'errors': ['Invalid email or password.']}), 401

    login_user(user, remember=form.remember.data)
    user.update_last_login()
    user.reset_failed_logins()
    return jsonify({'success': True, 'user': user.to_dict()})


@auth_bp.route('/logout')
def logout():
    """User logout"""
    logout_user()
    return jsonify({'success': True})
