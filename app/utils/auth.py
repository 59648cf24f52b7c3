"""
Capability tokens for admin and entry access.

The admin password is checked server-side once; the client then holds a
signed, timestamped token instead of a "logged in" flag. Entries receive a
token on registration that proves ownership when submitting picks.
"""

import hmac
import logging
from functools import wraps

from flask import current_app, g, jsonify, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

ADMIN_SALT = "admin-session"
ENTRY_SALT = "entry-session"


def _serializer(salt):
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=salt)


def check_admin_password(password):
    """Constant-time comparison against the configured admin password"""
    expected = current_app.config.get("ADMIN_PASSWORD") or ""
    if not expected or not password:
        return False
    return hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))


def create_admin_token():
    return _serializer(ADMIN_SALT).dumps({"role": "admin"})


def decode_admin_token(token):
    """Return the token payload, or None if it is invalid or expired"""
    if not token:
        return None
    try:
        payload = _serializer(ADMIN_SALT).loads(
            token, max_age=current_app.config.get("ADMIN_TOKEN_MAX_AGE")
        )
    except SignatureExpired:
        logger.info("Rejected expired admin token")
        return None
    except BadSignature:
        return None
    if not isinstance(payload, dict) or payload.get("role") != "admin":
        return None
    return payload


def create_entry_token(entry):
    return _serializer(ENTRY_SALT).dumps(
        {"entry_id": entry.id, "contest_id": entry.contest_id}
    )


def decode_entry_token(token):
    """Return the token payload, or None if it is invalid"""
    if not token:
        return None
    try:
        payload = _serializer(ENTRY_SALT).loads(token)
    except BadSignature:
        return None
    if not isinstance(payload, dict) or "entry_id" not in payload:
        return None
    return payload


def _bearer_token():
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return None


def admin_required(f):
    """Reject requests without a valid admin token"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token() or request.headers.get("X-Admin-Token")
        if decode_admin_token(token) is None:
            return jsonify({"error": "Admin authentication required"}), 401
        return f(*args, **kwargs)

    return decorated_function


def entry_token_required(f):
    """Load the entry token payload into g.entry_token"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        payload = decode_entry_token(request.headers.get("X-Entry-Token"))
        if payload is None:
            return jsonify({"error": "Entry token required"}), 401
        g.entry_token = payload
        return f(*args, **kwargs)

    return decorated_function
