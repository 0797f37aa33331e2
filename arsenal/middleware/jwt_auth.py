"""
JWT Auth Middleware — resolves the acting user for every API request.

Resolution order:
  1. ``Authorization: Bearer <token>``  →  g.current_user (User row for ``sub``)
  2. No token and API_AUTH_ENABLED=false  →  configured system user
     (development convenience only; production enables auth)
  3. Otherwise g.current_user stays None; protected routes answer 401.

The role used for authorization is always read from the users table, never
from the token claims, so demotions take effect immediately.
"""

import logging

import jwt as pyjwt
from flask import current_app, g, request

from arsenal.models import db
from arsenal.models.user import User
from arsenal.services.jwt_service import decode_access_token

logger = logging.getLogger(__name__)


def _auth_enabled() -> bool:
    return str(current_app.config.get("API_AUTH_ENABLED", "true")).lower() == "true"


def _system_user() -> User | None:
    user_id = current_app.config.get("SYSTEM_USER_ID")
    return db.session.get(User, user_id) if user_id else None


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.current_user = None
        g.auth_error = None

        # Probes and the root listing need no identity
        if not request.path.startswith("/api/"):
            return

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            if not _auth_enabled():
                g.current_user = _system_user()
            return

        token = auth_header[7:]
        try:
            payload = decode_access_token(token)
        except pyjwt.ExpiredSignatureError:
            g.auth_error = "Token expired"
            return
        except pyjwt.InvalidTokenError as exc:
            logger.info("Rejected bearer token: %s", exc)
            g.auth_error = "Invalid token"
            return

        user = db.session.get(User, str(payload["sub"]))
        if user is None:
            g.auth_error = "Unknown user"
            return
        g.current_user = user
