"""
Startup diagnostics — runs once when the Flask app starts.

Checks the database and the auth configuration, then logs a summary banner.
"""

import logging
import sys

from flask import Flask
from sqlalchemy import inspect as sa_inspect

from arsenal.models import db
from arsenal.models.user import User

logger = logging.getLogger(__name__)


def run_startup_diagnostics(app: Flask):
    """Run diagnostic checks during app startup (inside app context)."""
    if app.config.get("TESTING"):
        return

    issues: list[str] = []

    with app.app_context():
        py = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        db_status = "ok"
        db_uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
        db_type = "PostgreSQL" if "postgresql" in db_uri else "SQLite" if "sqlite" in db_uri else "unknown"
        try:
            db.session.execute(db.text("SELECT 1"))
        except Exception as exc:
            db.session.rollback()
            db_status = "FAILED"
            issues.append(f"Database unreachable: {exc}")

        table_count = "?"
        if db_status == "ok":
            table_count = len(sa_inspect(db.engine).get_table_names())
            if table_count == 0:
                issues.append("No tables found — run 'flask db upgrade'")

        auth_enabled = str(app.config.get("API_AUTH_ENABLED", "true")).lower() == "true"
        if not auth_enabled and db_status == "ok":
            system_user_id = app.config.get("SYSTEM_USER_ID")
            if not system_user_id or db.session.get(User, system_user_id) is None:
                issues.append("Auth disabled but system user missing — run 'flask seed-system-user'")

        banner = f"""
╔══════════════════════════════════════════════════════════════╗
║  Arsenal Showcase API — Startup Diagnostics                  ║
╠══════════════════════════════════════════════════════════════╣
║  Python      : {py:<46s}║
║  Debug       : {str(app.debug):<46s}║
║  Database    : {f'{db_type} ({db_status})':<46s}║
║  Tables      : {str(table_count):<46s}║
║  Auth        : {'ENABLED' if auth_enabled else 'DISABLED (system user)':<46s}║
╚══════════════════════════════════════════════════════════════╝"""
        logger.info(banner)

        if issues:
            logger.warning("Startup issues detected:")
            for issue in issues:
                logger.warning("  ⚠ %s", issue)
        else:
            logger.info("All startup checks passed")
