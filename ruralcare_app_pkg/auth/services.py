# ruralcare_app_pkg/auth/services.py
from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest, Conflict, Forbidden, Unauthorized

from .. import db
from ..models import User, Patient
from ..utils import create_access_token

INVALID_CREDENTIALS = "Invalid email or password"


def email_taken(email):
    return User.query.filter_by(email=email).first() is not None


def register_patient(name, email, password, role=None):
    """
    Self-registration. Creates a patient account plus a minimal Patient record
    (no clinical fields yet) in one transaction. Returns (token, user).
    """
    if not all([name, email, password]):
        raise BadRequest("name, email, and password are required")
    if role and role != 'patient':
        raise Forbidden("Only patients can self-register")
    if email_taken(email):
        raise Conflict("Email already registered")

    user = User(name=name, email=email, role='patient')
    user.set_password(password)
    try:
        db.session.add(user)
        db.session.flush()
        db.session.add(Patient(user_id=user.id, name=name, risk_level='low'))
        db.session.commit()
    except IntegrityError:
        # lost a race with a concurrent registration for the same email
        db.session.rollback()
        raise Conflict("Email already registered")

    current_app.logger.info(f"New patient registered: user_id {user.id}")
    return create_access_token(user), user


def authenticate_credentials(email, password):
    """Returns (token, user). Unknown email and wrong password fail identically."""
    if not email or not password:
        raise BadRequest("email and password are required")

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        current_app.logger.warning("Failed login attempt")
        raise Unauthorized(INVALID_CREDENTIALS)

    current_app.logger.info(f"User {user.id} ({user.role}) logged in successfully.")
    return create_access_token(user), user
