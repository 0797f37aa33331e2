"""
Audit domain model.

Models:
    - AuditLogEntry: immutable, append-only record of every administrative
      mutation (review decisions, incubation changes, creations).
"""

import uuid
from datetime import datetime, timezone

from arsenal.models import db

# ── Constants ────────────────────────────────────────────────────────────────

AUDIT_RESOURCE_TYPES = {"submission", "project", "incubation_project"}

AUDIT_ACTIONS = {
    # Submission lifecycle
    "create_submission",
    "submit_submission",
    "approve_submission",
    "reject_submission",
    "request_changes",
    # Incubation pipeline
    "nominate_incubation",
    "update_incubation",
    # Directory
    "create_project",
}


def _uuid():
    return str(uuid.uuid4())


class AuditLogEntry(db.Model):
    """
    One row per action.  ``details`` carries the action payload (reviewer
    notes, created project id, supplied incubation fields), not a diff.

    ``user_email`` is captured at write time so the trail stays readable
    after the user row is gone.
    """

    __tablename__ = "audit_log"
    __table_args__ = (
        db.Index("idx_audit_resource", "resource_type", "resource_id"),
        db.Index("idx_audit_action", "action"),
        db.Index("idx_audit_user", "user_id"),
        db.Index("idx_audit_created_at", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    action = db.Column(db.String(60), nullable=False)
    resource_type = db.Column(db.String(40), nullable=False)
    resource_id = db.Column(
        db.String(36), nullable=False,
        comment="PK of the referenced entity",
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    user_email = db.Column(db.String(255))
    details = db.Column(db.JSON, default=dict)
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "user_id": self.user_id,
            "user_email": self.user_email,
            "details": self.details or {},
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<AuditLogEntry {self.action} on {self.resource_type}/{self.resource_id}>"


# ── Convenience writer ───────────────────────────────────────────────────────

def write_audit(
    *,
    action: str,
    resource_type: str,
    resource_id: str,
    actor=None,
    details: dict | None = None,
) -> AuditLogEntry:
    """
    Append a single audit row.  Uses ``flush`` so callers keep
    transaction control: the row commits or rolls back together with the
    mutation it records.

    ``actor`` is the acting User (or None for system actions).
    """
    entry = AuditLogEntry(
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id),
        user_id=getattr(actor, "id", None),
        user_email=getattr(actor, "email", None),
        details=details or {},
    )
    db.session.add(entry)
    db.session.flush()
    return entry
