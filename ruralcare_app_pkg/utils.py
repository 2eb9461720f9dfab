# ruralcare_app_pkg/utils.py
import jwt
import datetime
from collections import namedtuple
from functools import wraps
from flask import request, jsonify, current_app, g

# Decoded token claims attached to g.current_user by login_required
Identity = namedtuple('Identity', ['id', 'name', 'email', 'role'])


# --- JWT Helper Functions ---
def create_access_token(user):
    """Creates a signed token carrying the user's id, name, email and role."""
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {
        'exp': now + datetime.timedelta(days=current_app.config.get('JWT_EXPIRATION_DAYS', 7)),
        'iat': now,
        'sub': str(user.id), # User ID (subject)
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': user.role,
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm=current_app.config.get('JWT_ALGORITHM', 'HS256'))


def decode_access_token(token):
    """
    Decodes a JWT access token.
    Returns an Identity if successful, or None if the token is expired, tampered or malformed.
    """
    key_to_use = current_app.config['JWT_SECRET_KEY']
    algo = current_app.config.get('JWT_ALGORITHM', 'HS256')
    try:
        payload = jwt.decode(token, key_to_use, algorithms=[algo])
    except jwt.ExpiredSignatureError:
        current_app.logger.info("Token decode failed: ExpiredSignatureError")
        return None
    except jwt.InvalidSignatureError:
        current_app.logger.warning("Token decode failed: InvalidSignatureError (Wrong secret key or tampered token)")
        return None
    except jwt.InvalidTokenError as e:
        current_app.logger.warning(f"Token decode failed: {e}")
        return None

    try:
        return Identity(int(payload['id']), payload['name'], payload['email'], payload['role'])
    except (KeyError, TypeError, ValueError):
        current_app.logger.warning("Token decode failed: claims missing from payload")
        return None


def get_bearer_token():
    auth_header = request.headers.get('Authorization')
    if auth_header and auth_header.startswith('Bearer '):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


# --- Authentication & role gates ---
def login_required(f):
    """Verifies the bearer token and attaches the decoded identity to g.current_user."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_bearer_token()
        if not token:
            return jsonify({"error": "No token provided"}), 401

        identity = decode_access_token(token)
        if identity is None:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = identity
        return f(*args, **kwargs)
    return decorated_function


def role_required(*roles):
    """Rejects callers whose role is not in `roles`. Must be stacked under login_required."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            current_user = getattr(g, 'current_user', None)
            if current_user is None:
                return jsonify({"error": "Not authenticated"}), 401
            if current_user.role not in roles:
                return jsonify({"error": f"Access denied. Required role: {' or '.join(roles)}"}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def is_patient(identity):
    return identity is not None and identity.role == 'patient'


def is_admin_or_doctor(identity):
    return identity is not None and identity.role in ('admin', 'doctor')


def parse_int(value):
    """Helper: coerce a JSON/query value to int, returns None on failure."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def ensure_json():
    """before_request hook for blueprints that only accept JSON bodies on writes."""
    if request.method in ['POST', 'PUT', 'PATCH'] and not request.is_json:
        return jsonify({"error": "Request body must be JSON."}), 415
