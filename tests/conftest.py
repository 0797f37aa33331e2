"""
Shared pytest fixtures for the Arsenal Showcase API test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - author / moderator / admin: Pre-created users of each role
    - auth_headers: Bearer-token headers for a given user
    - payload: A submission payload that passes validation
"""

import pytest

from arsenal import create_app
from arsenal.models import db as _db
from arsenal.models.user import User
from arsenal.services.jwt_service import generate_access_token


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Users & identity ─────────────────────────────────────────────────────


def make_user(email, name, role="user", theatre=None):
    user = User(email=email, name=name, role=role, theatre=theatre)
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture()
def author():
    return make_user("author@example.com", "Ada Author", theatre="EMEA")


@pytest.fixture()
def moderator():
    return make_user("mod@example.com", "Morgan Moderator", role="moderator")


@pytest.fixture()
def admin():
    return make_user("admin@example.com", "Alex Admin", role="admin")


@pytest.fixture()
def auth_headers():
    """Return a callable building Authorization headers for a user."""

    def _headers(user):
        return {"Authorization": f"Bearer {generate_access_token(user)}"}

    return _headers


# ── Payloads ─────────────────────────────────────────────────────────────


@pytest.fixture()
def payload():
    return {
        "name": "Test Project",
        "description": "A test project for automated testing",
        "link": "https://github.com/test/project",
        "language": "Python",
    }
