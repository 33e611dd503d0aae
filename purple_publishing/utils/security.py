"""Password hashing and bearer token helpers."""

import base64
import binascii
import hashlib
import hmac
from datetime import timedelta

import jwt
from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from .dates import utcnow

LEGACY_PREFIX = 'PBKDF2'


def hash_password(password):
    """Hash a password with salted PBKDF2-HMAC-SHA256."""
    iterations = current_app.config.get('PASSWORD_HASH_ITERATIONS', 100000)
    return generate_password_hash(password, method=f'pbkdf2:sha256:{iterations}',
                                  salt_length=16)


def verify_password(password, stored_hash):
    """Check a password against a stored hash in constant time.

    Accepts Werkzeug hashes and the ``PBKDF2$iterations$salt$key`` format
    (base64 salt and key, optional leading version segment) of imported
    accounts.
    """
    if not stored_hash or not stored_hash.strip():
        return False
    parts = stored_hash.split('$')
    if len(parts) in (4, 5) and parts[-4].upper() == LEGACY_PREFIX:
        return _verify_legacy(password, parts[-3:])
    try:
        return check_password_hash(stored_hash, password)
    except ValueError:
        return False


def _verify_legacy(password, parts):
    iterations, salt, expected = parts
    try:
        iterations = int(iterations)
        salt = base64.b64decode(salt, validate=True)
        expected = base64.b64decode(expected, validate=True)
    except (ValueError, binascii.Error):
        return False
    if iterations < 1 or not expected:
        return False
    actual = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt,
                                 iterations, dklen=len(expected))
    return hmac.compare_digest(actual, expected)


def issue_token(user):
    """Issue a signed, time-limited bearer token for ``user``."""
    config = current_app.config
    now = utcnow()
    claims = {
        'sub': user.id,
        'email': user.email,
        'role': user.role,
        'iss': config['JWT_ISSUER'],
        'aud': config['JWT_AUDIENCE'],
        'iat': now,
        'exp': now + timedelta(hours=config['JWT_EXPIRES_HOURS']),
    }
    return jwt.encode(claims, config['JWT_SECRET_KEY'], algorithm='HS256')


def decode_token(token):
    """Return the verified claims of ``token``, or None when invalid."""
    config = current_app.config
    try:
        return jwt.decode(
            token,
            config['JWT_SECRET_KEY'],
            algorithms=['HS256'],
            audience=config['JWT_AUDIENCE'],
            issuer=config['JWT_ISSUER'],
            options={'require': ['sub', 'exp']},
        )
    except jwt.InvalidTokenError:
        return None


def bearer_token(authorization):
    """Extract the token from an ``Authorization: Bearer ...`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()
