"""
User model — directory members and reviewers.

Roles are hierarchical: user < moderator < admin.  Authorization checks
compare ranks via ``role_at_least`` instead of testing role names.
"""

import uuid
from datetime import datetime, timezone

from arsenal.models import db

ROLE_HIERARCHY = ("user", "moderator", "admin")
VALID_ROLES = frozenset(ROLE_HIERARCHY)
THEATRES = ("NAM", "JAPAC", "EMEA", "LATAM", "Global")


def _uuid():
    return str(uuid.uuid4())


def role_rank(role: str | None) -> int:
    """Position of *role* in the hierarchy; unknown roles rank below ``user``."""
    try:
        return ROLE_HIERARCHY.index(role)
    except ValueError:
        return -1


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    email = db.Column(db.String(255), nullable=False, unique=True)
    name = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="user")
    theatre = db.Column(db.String(20))
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.CheckConstraint(
            "role IN ('user', 'moderator', 'admin')", name="ck_users_role",
        ),
    )

    def role_at_least(self, minimum: str) -> bool:
        return role_rank(self.role) >= role_rank(minimum)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "theatre": self.theatre,
        }

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
