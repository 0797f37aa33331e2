"""
Arsenal Showcase API
Flask Application Factory.

Usage:
    from arsenal import create_app
    app = create_app()           # APP_ENV, defaulting to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os
import traceback

import click
from flask import Flask, abort, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event
from werkzeug.exceptions import HTTPException

from arsenal.config import config
from arsenal.core.exceptions import (
    AuthenticationRequired,
    ConflictError,
    NotFoundError,
    PermissionDenied,
    TransitionError,
    ValidationError,
)
from arsenal.middleware.diagnostics import run_startup_diagnostics
from arsenal.middleware.jwt_auth import init_jwt_middleware
from arsenal.middleware.logging_config import configure_logging
from arsenal.middleware.rate_limiter import init_rate_limits
from arsenal.middleware.security_headers import init_security_headers
from arsenal.middleware.timing import init_request_timing
from arsenal.models import db
from arsenal.utils.errors import E, api_error

logger = logging.getLogger(__name__)

API_NAME = "Cortex Pre-Sales Arsenal API"
API_VERSION = "1.0.0"


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # limits are applied per blueprint
)

_HTTP_CODES = {
    400: E.VALIDATION_INVALID,
    401: E.UNAUTHENTICATED,
    403: E.FORBIDDEN,
    404: E.NOT_FOUND,
    405: E.METHOD_NOT_ALLOWED,
    413: E.PAYLOAD_TOO_LARGE,
    415: E.UNSUPPORTED_MEDIA_TYPE,
    429: E.RATE_LIMITED,
}


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to the APP_ENV env var, or "development".

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and ":memory:" not in \
            app.config["SQLALCHEMY_DATABASE_URI"]:
        os.makedirs(app.instance_path, exist_ok=True)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()],
             supports_credentials=True)
    else:
        CORS(app)

    # ── Security headers / request timing / identity ─────────────────────
    init_security_headers(app)
    init_request_timing(app)
    init_jwt_middleware(app)

    # ── Request guards (input length + Content-Type) ─────────────────────
    @app.before_request
    def _guard_request():
        max_len = app.config.get("MAX_CONTENT_LENGTH")
        if max_len and request.content_length and request.content_length > max_len:
            abort(413, description="Request body too large")
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/"):
            ct = request.content_type or ""
            if request.get_data(cache=True) and "json" not in ct:
                abort(415, description="Content-Type must be application/json")

    # ── Import all models so Alembic and create_all see them ─────────────
    from arsenal.models import audit as _audit_models            # noqa: F401
    from arsenal.models import incubation as _incubation_models  # noqa: F401
    from arsenal.models import project as _project_models        # noqa: F401
    from arsenal.models import submission as _submission_models  # noqa: F401
    from arsenal.models import user as _user_models              # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS; migrations own changes) ─
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from arsenal.blueprints.admin_bp import admin_bp
    from arsenal.blueprints.health_bp import health_bp
    from arsenal.blueprints.projects_bp import projects_bp
    from arsenal.blueprints.submissions_bp import submissions_bp
    from arsenal.blueprints.users_bp import users_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(submissions_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(users_bp)

    @app.route("/")
    def index():
        return jsonify({
            "name": API_NAME,
            "version": API_VERSION,
            "endpoints": {
                "projects": "/api/projects",
                "submissions": "/api/submissions",
                "admin": "/api/admin",
                "users": "/api/users",
                "health": "/health",
                "ready": "/ready",
            },
        })

    _register_error_handlers(app)
    _register_cli(app)

    # ── Startup diagnostics ──────────────────────────────────────────────
    run_startup_diagnostics(app)

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app


def _register_error_handlers(app):
    """One JSON error shape for every blueprint: {"error": {message, code, ...}}."""

    @app.errorhandler(NotFoundError)
    def _not_found(exc):
        return api_error(E.NOT_FOUND, str(exc))

    @app.errorhandler(ValidationError)
    def _validation(exc):
        return api_error(E.VALIDATION_INVALID, str(exc), details=exc.details)

    @app.errorhandler(ConflictError)
    def _conflict(exc):
        return api_error(E.CONFLICT_DUPLICATE, str(exc), details={exc.field: "already exists"})

    @app.errorhandler(TransitionError)
    def _transition(exc):
        return api_error(E.CONFLICT_STATE, str(exc))

    @app.errorhandler(AuthenticationRequired)
    def _unauthenticated(exc):
        return api_error(E.UNAUTHENTICATED, str(exc))

    @app.errorhandler(PermissionDenied)
    def _forbidden(exc):
        return api_error(E.FORBIDDEN, str(exc))

    @app.errorhandler(HTTPException)
    def _http(exc):
        code = _HTTP_CODES.get(exc.code, E.INTERNAL)
        if exc.code == 404:
            message = f"Not found: {request.path}"
        else:
            message = exc.description or exc.name
        return api_error(code, message, status=exc.code)

    @app.errorhandler(Exception)
    def _unhandled(exc):
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        stack = traceback.format_exc() if app.debug else None
        return api_error(E.INTERNAL, str(exc) or "Internal server error", stack=stack)


def _register_cli(app):

    @app.cli.command("seed-system-user")
    def seed_system_user_cmd():
        """Create the development fallback admin (SYSTEM_USER_ID)."""
        from arsenal.models.user import User
        from arsenal.services.user_service import create_user

        user_id = app.config["SYSTEM_USER_ID"]
        if db.session.get(User, user_id) is not None:
            click.echo(f"System user {user_id} already exists.")
            return
        create_user(
            app.config["SYSTEM_USER_EMAIL"], "System Admin", role="admin", user_id=user_id,
        )
        click.echo(f"Seeded system user {user_id}.")

    @app.cli.command("create-user")
    @click.argument("email")
    @click.argument("name")
    @click.option("--role", default="user", show_default=True,
                  type=click.Choice(["user", "moderator", "admin"]))
    @click.option("--theatre", default=None)
    def create_user_cmd(email, name, role, theatre):
        """Create a user account."""
        from arsenal.services.user_service import create_user

        try:
            user = create_user(email, name, role=role, theatre=theatre)
        except (ValidationError, ConflictError) as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Created {user.role} {user.email} ({user.id})")

    @app.cli.command("issue-token")
    @click.argument("email")
    def issue_token_cmd(email):
        """Print a bearer access token for EMAIL (development only)."""
        from arsenal.models.user import User
        from arsenal.services.jwt_service import generate_access_token

        user = User.query.filter_by(email=email.strip()).first()
        if user is None:
            raise click.ClickException(f"No user with email {email}")
        click.echo(generate_access_token(user))
