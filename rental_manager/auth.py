# rental_manager/auth.py
"""Operator login and the per-request session built from the bearer token."""
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import current_app, g, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt, verify_jwt_in_request

from .errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    username: str
    issued_at: datetime

    def to_dict(self):
        return {'username': self.username, 'issuedAt': self.issued_at.isoformat()}


def login(username, password):
    """
    Return (token, session) for the configured operator, or None on bad credentials.

    Raises ValidationError when either credential is missing.
    """
    if not username or not password:
        raise ValidationError('username and password are required')
    expected_user = current_app.config['AUTH_USERNAME']
    expected_password = current_app.config['AUTH_PASSWORD']
    user_ok = hmac.compare_digest(str(username).encode(), expected_user.encode())
    password_ok = hmac.compare_digest(str(password).encode(), expected_password.encode())
    if not (user_ok and password_ok):
        logger.warning("Rejected login for %r", username)
        return None
    token = create_access_token(identity=str(username))
    session = AuthSession(username=str(username), issued_at=datetime.now(timezone.utc))
    logger.info("Operator %s logged in", username)
    return token, session


def load_session():
    """
    Validate the bearer token and expose it as ``g.auth_session``.

    Used as a ``before_request`` hook on every protected blueprint.
    """
    if request.method == 'OPTIONS':
        return
    verify_jwt_in_request()
    claims = get_jwt()
    g.auth_session = AuthSession(
        username=claims['sub'],
        issued_at=datetime.fromtimestamp(claims['iat'], tz=timezone.utc),
    )


def current_session():
    return g.get('auth_session')


def register_jwt_callbacks(jwt):
    """Keep token failures in the same ``{error}`` shape as everything else."""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify(error='Authentication required'), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify(error='Invalid session token'), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify(error='Session expired'), 401
