"""
IncubationProject model — secondary promotion pipeline for published
projects (nominated → in-review → ready → promoted).

The maturity score is set manually by moderators.  A score at or above
``ARSENAL_READY_THRESHOLD`` marks the project "Arsenal ready"; that is a
read filter only, never a status change.
"""

import uuid
from datetime import datetime, timezone

from arsenal.models import db

INCUBATION_STATUSES = ("nominated", "in-review", "ready", "promoted")
PROMOTION_TARGETS = ("pre-sales", "regional-nam", "regional-emea", "regional-japac", "global")
ARSENAL_READY_THRESHOLD = 85
MATURITY_MIN, MATURITY_MAX = 0, 100


def _uuid():
    return str(uuid.uuid4())


class IncubationProject(db.Model):
    __tablename__ = "incubation_projects"
    __table_args__ = (
        db.Index("idx_incubation_project", "project_id"),
        db.Index("idx_incubation_status", "status"),
        db.CheckConstraint(
            "maturity_score >= 0 AND maturity_score <= 100",
            name="ck_incubation_maturity_range",
        ),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False,
    )
    status = db.Column(db.String(20), nullable=False, default="nominated")
    target = db.Column(db.String(30), nullable=False)
    nominated_by = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    maturity_score = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text)

    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    project = db.relationship("Project", back_populates="incubations")

    @property
    def is_arsenal_ready(self) -> bool:
        return (self.maturity_score or 0) >= ARSENAL_READY_THRESHOLD

    def to_dict(self, include_project: bool = False):
        result = {
            "id": self.id,
            "project_id": self.project_id,
            "status": self.status,
            "target": self.target,
            "nominated_by": self.nominated_by,
            "maturity_score": self.maturity_score,
            "notes": self.notes,
            "arsenal_ready": self.is_arsenal_ready,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_project and self.project is not None:
            result["project_name"] = self.project.name
            result["project_description"] = self.project.description
        return result

    def __repr__(self):
        return f"<IncubationProject {self.id} [{self.status}] score={self.maturity_score}>"
