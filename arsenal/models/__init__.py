"""
Arsenal Showcase — shared SQLAlchemy handle.

Every model module imports ``db`` from here:
    from arsenal.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
