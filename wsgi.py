"""
Flask-Migrate / Alembic and WSGI entry point.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi seed-system-user
"""

from arsenal import create_app

app = create_app()
