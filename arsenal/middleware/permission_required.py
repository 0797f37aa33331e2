"""
Permission Decorators — role-hierarchy checks for route protection.

Usage:
    @bp.route("/<submission_id>/approve", methods=["POST"])
    @require_role("moderator")
    def approve(submission_id):
        ...

    @bp.route("", methods=["POST"])
    @login_required
    def create_submission():
        actor = current_user()
        ...

Failures raise AuthenticationRequired (401) or PermissionDenied (403);
the app-level error handlers render them.
"""

import functools
import logging

from flask import g

from arsenal.core.exceptions import AuthenticationRequired, PermissionDenied

logger = logging.getLogger(__name__)


def current_user():
    """Return the User resolved by the JWT middleware, or raise 401."""
    user = getattr(g, "current_user", None)
    if user is None:
        raise AuthenticationRequired(getattr(g, "auth_error", None) or "Authentication required")
    return user


def login_required(f):
    """Decorator: any authenticated user."""

    @functools.wraps(f)
    def decorated(*args, **kwargs):
        current_user()
        return f(*args, **kwargs)
    return decorated


def require_role(minimum: str):
    """
    Decorator: require the acting user's role to be at least *minimum*
    in the hierarchy user < moderator < admin.
    """
    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            user = current_user()
            if not user.role_at_least(minimum):
                logger.warning(
                    "User %s (%s) denied on %s: requires %s",
                    user.id, user.role, f.__name__, minimum,
                )
                raise PermissionDenied(user.id, f.__name__, minimum)
            return f(*args, **kwargs)
        return decorated
    return decorator
