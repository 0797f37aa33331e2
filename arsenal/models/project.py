"""
Project model — a directory entry on the showcase.

Projects are created either directly (``POST /api/projects``) or exactly
once per approved submission, by copying fields out of the submission
payload.  ``published_at`` is only set for published entries.
"""

import uuid
from datetime import datetime, timezone

from arsenal.models import db

PROJECT_STATUSES = ("draft", "published")
PRODUCTS = ("Cortex XSIAM", "Cortex XDR", "Cortex XSOAR", "Prisma Cloud", "Strata")

# VARCHAR limits of the free-text columns; payloads are checked against these.
FIELD_LENGTHS = {"name": 200, "link": 500, "repo": 300, "language": 50}


def _uuid():
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


class Project(db.Model):
    __tablename__ = "projects"
    __table_args__ = (
        db.Index("idx_projects_status", "status"),
        db.Index("idx_projects_product", "product"),
        db.Index("idx_projects_theatre", "theatre"),
        db.Index("idx_projects_submitted_by", "submitted_by"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    name = db.Column(db.String(FIELD_LENGTHS["name"]), nullable=False, unique=True)
    description = db.Column(db.Text)
    link = db.Column(db.String(FIELD_LENGTHS["link"]))
    repo = db.Column(db.String(FIELD_LENGTHS["repo"]))
    product = db.Column(db.String(50))
    theatre = db.Column(db.String(20))
    usecase = db.Column(db.Text)
    language = db.Column(db.String(FIELD_LENGTHS["language"]))
    status = db.Column(db.String(20), nullable=False, default="draft")

    submitted_by = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False,
    )
    reviewed_by = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )

    tags = db.Column(db.JSON, default=list)
    technical_stack = db.Column(db.JSON, default=list)

    published_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    incubations = db.relationship(
        "IncubationProject", back_populates="project", lazy="select",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "link": self.link,
            "repo": self.repo,
            "product": self.product,
            "theatre": self.theatre,
            "usecase": self.usecase,
            "language": self.language,
            "status": self.status,
            "submitted_by": self.submitted_by,
            "reviewed_by": self.reviewed_by,
            "tags": self.tags or [],
            "technical_stack": self.technical_stack or [],
            "published_at": _iso(self.published_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Project {self.name!r} [{self.status}]>"
