"""
Submission model — a user-proposed project awaiting review.

Lifecycle: draft → pending-review → approved | rejected | needs-work,
with needs-work → pending-review for resubmission.  The proposed project
fields live in the opaque ``data`` JSON payload until approval copies them
into a ``projects`` row.
"""

import uuid
from datetime import datetime, timezone

from arsenal.models import db

SUBMISSION_STATUSES = ("draft", "pending-review", "needs-work", "approved", "rejected")

# Statuses in which the owner may still edit the payload.
EDITABLE_STATUSES = frozenset({"draft", "needs-work"})

SUBMISSION_TRANSITIONS = {
    "submit_for_review": {"from": ["draft", "needs-work"], "to": "pending-review"},
    "approve": {"from": ["pending-review"], "to": "approved"},
    "reject": {"from": ["pending-review"], "to": "rejected"},
    "request_changes": {"from": ["pending-review"], "to": "needs-work"},
}


def _uuid():
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


class Submission(db.Model):
    __tablename__ = "submissions"
    __table_args__ = (
        db.Index("idx_submissions_status", "status"),
        db.Index("idx_submissions_submitted_by", "submitted_by"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    data = db.Column(db.JSON, nullable=False, default=dict)
    status = db.Column(db.String(20), nullable=False, default="draft")

    submitted_by = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    reviewed_by = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    reviewed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    rejection_reason = db.Column(db.Text)
    review_notes = db.Column(db.Text)
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    submitter = db.relationship("User", foreign_keys=[submitted_by], lazy="joined")

    def to_dict(self):
        result = {
            "id": self.id,
            "data": self.data or {},
            "status": self.status,
            "submitted_by": self.submitted_by,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": _iso(self.reviewed_at),
            "rejection_reason": self.rejection_reason,
            "review_notes": self.review_notes,
            "submitted_at": _iso(self.submitted_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if self.submitter is not None:
            result["submitted_by_name"] = self.submitter.name
            result["submitted_by_email"] = self.submitter.email
        return result

    def __repr__(self):
        return f"<Submission {self.id} [{self.status}]>"
