"""
Submission Lifecycle Service — review state machine.

Manages submission status transitions with:
  - Transition validation (SUBMISSION_TRANSITIONS)
  - Ownership checks for author actions (edit, submit)
  - Side effects (approve → create Project, reviewer + timestamp)
  - Audit trail: exactly one audit_log row per transition, written in the
    same transaction as the mutation

Transitions:
  submit_for_review   draft | needs-work → pending-review   (owner)
  approve             pending-review → approved             (moderator+)
  reject              pending-review → rejected             (moderator+)
  request_changes     pending-review → needs-work           (moderator+)

Role checks for reviewer actions live on the routes (@require_role);
this module trusts the ``actor`` it is given.

Usage:
    from arsenal.services import submission_lifecycle

    result = submission_lifecycle.approve(sid, actor=user, publish_immediately=True)
"""

import logging
from datetime import datetime, timezone

from arsenal.core.exceptions import (
    ConflictError,
    PermissionDenied,
    TransitionError,
    ValidationError,
)
from arsenal.models import db
from arsenal.models.audit import write_audit
from arsenal.models.project import Project
from arsenal.models.submission import (
    EDITABLE_STATUSES,
    SUBMISSION_STATUSES,
    SUBMISSION_TRANSITIONS,
    Submission,
)
from arsenal.models.user import User
from arsenal.services.submission_schema import validate_payload
from arsenal.utils.helpers import atomic, get_or_404, optional_text

logger = logging.getLogger(__name__)

# Payload keys copied onto the Project row at approval time.
_PROJECT_FIELDS = ("name", "description", "link", "repo", "product", "theatre", "usecase", "language")


def _now():
    return datetime.now(timezone.utc)


def validate_transition(submission: Submission, action: str) -> dict:
    """
    Validate whether an action is valid for the current status.

    Returns:
        {"valid": bool, "from": str, "to": str|None, "reason": str|None}
    """
    rule = SUBMISSION_TRANSITIONS.get(action)
    if not rule:
        return {"valid": False, "from": submission.status, "to": None,
                "reason": f"Unknown action: {action}"}

    if submission.status not in rule["from"]:
        return {"valid": False, "from": submission.status, "to": rule["to"],
                "reason": f"allowed from: {', '.join(rule['from'])}"}

    return {"valid": True, "from": submission.status, "to": rule["to"], "reason": None}


def _load_for(submission_id: str, action: str) -> tuple[Submission, str]:
    """Fetch the submission and check *action* is allowed.  Returns (row, new_status)."""
    submission = get_or_404(Submission, submission_id)
    validation = validate_transition(submission, action)
    if not validation["valid"]:
        raise TransitionError("Submission", action, submission.status, validation["reason"])
    return submission, validation["to"]


def _require_owner(submission: Submission, actor: User, action: str):
    if submission.submitted_by != actor.id:
        raise PermissionDenied(actor.id, action)


def _log_transition(submission: Submission, action: str, previous: str, actor: User):
    logger.info(
        "Submission %s: %s → %s", action, previous, submission.status,
        extra={"event_type": f"submission.{action}", "resource_id": submission.id,
               "user_id": actor.id},
    )


# ── Author actions ─────────────────────────────────────────────────────────────


def create_submission(data, actor: User) -> Submission:
    """Store a new draft owned by *actor*.  Drafts may be incomplete."""
    if not isinstance(data, dict):
        raise ValidationError("Submission data must be a JSON object")

    with atomic():
        submission = Submission(data=data, status="draft", submitted_by=actor.id)
        db.session.add(submission)
        db.session.flush()
        write_audit(
            action="create_submission",
            resource_type="submission",
            resource_id=submission.id,
            actor=actor,
            details={"name": data.get("name")},
        )

    logger.info("Draft submission created", extra={"resource_id": submission.id, "user_id": actor.id})
    return submission


def update_submission(submission_id: str, data, actor: User) -> Submission:
    """Replace the payload of a draft / needs-work submission (owner only)."""
    if not isinstance(data, dict):
        raise ValidationError("Submission data must be a JSON object")

    submission = get_or_404(Submission, submission_id)
    _require_owner(submission, actor, "update_submission")
    if submission.status not in EDITABLE_STATUSES:
        raise TransitionError(
            "Submission", "update", submission.status,
            "only draft or needs-work submissions can be edited",
        )

    with atomic():
        submission.data = data
        submission.updated_at = _now()
    return submission


def submit_for_review(submission_id: str, actor: User) -> Submission:
    """Mark a draft (or a reworked needs-work submission) ready for review.

    The payload is validated and normalised first; review notes from an
    earlier request-changes round are kept until the next review decision.
    """
    submission, new_status = _load_for(submission_id, "submit_for_review")
    _require_owner(submission, actor, "submit_for_review")

    clean = validate_payload(submission.data or {}, default_author=actor.name)
    previous = submission.status

    with atomic():
        submission.data = {**(submission.data or {}), **clean}
        submission.status = new_status
        submission.submitted_at = _now()
        write_audit(
            action="submit_submission",
            resource_type="submission",
            resource_id=submission.id,
            actor=actor,
            details={"previous_status": previous},
        )

    _log_transition(submission, "submit_for_review", previous, actor)
    return submission


# ── Reviewer actions ───────────────────────────────────────────────────────────


def approve(submission_id: str, actor: User, publish_immediately: bool = True) -> dict:
    """
    Approve a pending submission and create its Project.

    The project is ``published`` with ``published_at`` set when
    *publish_immediately*, otherwise ``draft`` with no publication time.
    Project insert, submission update and audit row share one transaction.

    Returns:
        {"project": <project dict>, "submission": <submission dict>}

    Raises:
        NotFoundError, TransitionError, ValidationError, ConflictError
    """
    submission, new_status = _load_for(submission_id, "approve")
    payload = submission.data or {}

    name = (payload.get("name") or "").strip() if isinstance(payload.get("name"), str) else ""
    if not name:
        raise ValidationError("Submission data has no project name", details={"name": "required"})

    now = _now()
    previous = submission.status
    conflict = ConflictError("Project", "name", name, message="Project name already exists")

    with atomic(conflict=conflict):
        fields = {key: payload.get(key) for key in _PROJECT_FIELDS}
        fields["name"] = name
        project = Project(
            **fields,
            status="published" if publish_immediately else "draft",
            submitted_by=submission.submitted_by,
            reviewed_by=actor.id,
            tags=payload.get("tags") or [],
            technical_stack=payload.get("technical_stack") or [],
            published_at=now if publish_immediately else None,
        )
        db.session.add(project)
        db.session.flush()

        submission.status = new_status
        submission.reviewed_by = actor.id
        submission.reviewed_at = now

        write_audit(
            action="approve_submission",
            resource_type="submission",
            resource_id=submission.id,
            actor=actor,
            details={"project_id": project.id, "published": bool(publish_immediately)},
        )

    _log_transition(submission, "approve", previous, actor)
    return {"project": project.to_dict(), "submission": submission.to_dict()}


def reject(submission_id: str, actor: User, reason: str | None = None,
           notes: str | None = None) -> Submission:
    """Reject a pending submission.  No project is created or removed."""
    reason = optional_text(reason, "reason")
    notes = optional_text(notes, "notes")
    submission, new_status = _load_for(submission_id, "reject")
    previous = submission.status

    with atomic():
        submission.status = new_status
        submission.reviewed_by = actor.id
        submission.reviewed_at = _now()
        submission.rejection_reason = reason
        submission.review_notes = notes
        write_audit(
            action="reject_submission",
            resource_type="submission",
            resource_id=submission.id,
            actor=actor,
            details={"reason": reason, "notes": notes},
        )

    _log_transition(submission, "reject", previous, actor)
    return submission


def request_changes(submission_id: str, actor: User, notes: str | None = None) -> Submission:
    """Send a pending submission back to its author with review notes."""
    notes = optional_text(notes, "notes")
    submission, new_status = _load_for(submission_id, "request_changes")
    previous = submission.status

    with atomic():
        submission.status = new_status
        submission.reviewed_by = actor.id
        submission.reviewed_at = _now()
        submission.review_notes = notes
        write_audit(
            action="request_changes",
            resource_type="submission",
            resource_id=submission.id,
            actor=actor,
            details={"notes": notes},
        )

    _log_transition(submission, "request_changes", previous, actor)
    return submission


# ── Queries ────────────────────────────────────────────────────────────────────


def list_submissions(status: str | None = None, submitted_by: str | None = None) -> list[Submission]:
    """All submissions, newest submitted first; never-submitted drafts last."""
    if status and status not in SUBMISSION_STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'",
            details={"status": f"must be one of: {', '.join(SUBMISSION_STATUSES)}"},
        )
    q = Submission.query
    if status:
        q = q.filter(Submission.status == status)
    if submitted_by:
        q = q.filter(Submission.submitted_by == submitted_by)
    return q.order_by(
        Submission.submitted_at.desc().nulls_last(),
        Submission.created_at.desc(),
    ).all()


def get_submission(submission_id: str, actor: User) -> Submission:
    """Owner or moderator+ may read a submission."""
    submission = get_or_404(Submission, submission_id)
    if submission.submitted_by != actor.id and not actor.role_at_least("moderator"):
        raise PermissionDenied(actor.id, "view_submission", "moderator")
    return submission
