"""
Authentication Forms
Login and registration payloads, validated with WTForms (CSRF via Flask-WTF)
"""
import re

from flask import current_app
from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Email, EqualTo, Length

# (config switch, pattern, description used in the error message)
PASSWORD_RULES = [
    ('PASSWORD_REQUIRE_UPPERCASE', r'[A-Z]', 'an uppercase letter'),
    ('PASSWORD_REQUIRE_LOWERCASE', r'[a-z]', 'a lowercase letter'),
    ('PASSWORD_REQUIRE_DIGIT', r'\d', 'a number'),
    ('PASSWORD_REQUIRE_SPECIAL', r'[!@#$%^&*(),.?":{}|<>]', 'a special character'),
]


class LoginForm(FlaskForm):
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email address')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
    remember = BooleanField('Remember Me')


class RegisterForm(FlaskForm):
    name = StringField('Name', validators=[
        DataRequired(message='Name is required'),
        Length(min=2, max=100, message='Name must be between 2 and 100 characters')
    ])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email address'),
        Length(max=120)
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
    confirm_password = PasswordField('Confirm Password', validators=[
        DataRequired(message='Please confirm your password'),
        EqualTo('password', message='Passwords must match')
    ])


def validate_password_strength(password):
    """
    Check *password* against the PASSWORD_* settings in config.

    Returns: (is_valid, error_message)
    """
    min_length = current_app.config.get('PASSWORD_MIN_LENGTH', 10)

    missing = []
    if len(password) < min_length:
        missing.append(f'at least {min_length} characters')
    for setting, pattern, description in PASSWORD_RULES:
        if current_app.config.get(setting, True) and not re.search(pattern, password):
            missing.append(description)

    if missing:
        return False, f"Password must contain {', '.join(missing)}"
    return True, None


def form_errors(form):
    """Flatten WTForms field errors into a list of messages."""
    return [message for messages in form.errors.values() for message in messages]
