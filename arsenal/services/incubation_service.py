"""
Incubation Pipeline Service.

Secondary promotion pipeline layered on directory projects:
nominated → in-review → ready → promoted.

Business rules enforced here (not in the blueprint):
    - target must be one of PROMOTION_TARGETS
    - status must be one of INCUBATION_STATUSES
    - maturity_score is an integer in 0–100
    - an update with no recognised field is rejected before any DB write
    - every mutation writes one audit_log row in the same transaction
"""

from __future__ import annotations

import logging

from arsenal.core.exceptions import ValidationError
from arsenal.models import db
from arsenal.models.audit import write_audit
from arsenal.models.incubation import (
    ARSENAL_READY_THRESHOLD,
    INCUBATION_STATUSES,
    MATURITY_MAX,
    MATURITY_MIN,
    PROMOTION_TARGETS,
    IncubationProject,
)
from arsenal.models.project import Project
from arsenal.models.user import User
from arsenal.utils.helpers import atomic, get_or_404, optional_text

logger = logging.getLogger(__name__)


def _parse_maturity(value) -> int:
    """Accept ints (and integral floats / numeric strings) in 0–100."""
    if isinstance(value, bool):
        raise ValidationError("maturity_score must be an integer",
                              details={"maturity_score": "not an integer"})
    try:
        score = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("maturity_score must be an integer",
                              details={"maturity_score": "not an integer"}) from None
    if isinstance(value, float) and value != score:
        raise ValidationError("maturity_score must be an integer",
                              details={"maturity_score": "not an integer"})
    if not MATURITY_MIN <= score <= MATURITY_MAX:
        raise ValidationError(
            f"maturity_score must be between {MATURITY_MIN} and {MATURITY_MAX}",
            details={"maturity_score": "out of range"},
        )
    return score


def nominate(project_id: str, target: str, actor: User, notes: str | None = None) -> IncubationProject:
    """Nominate a project for incubation with status ``nominated`` and score 0."""
    notes = optional_text(notes, "notes")
    if target not in PROMOTION_TARGETS:
        raise ValidationError(
            f"Invalid target '{target}'",
            details={"target": f"must be one of: {', '.join(PROMOTION_TARGETS)}"},
        )
    project = get_or_404(Project, project_id)

    with atomic():
        incubation = IncubationProject(
            project_id=project.id,
            status="nominated",
            target=target,
            nominated_by=actor.id,
            maturity_score=0,
            notes=notes,
        )
        db.session.add(incubation)
        db.session.flush()
        write_audit(
            action="nominate_incubation",
            resource_type="incubation_project",
            resource_id=incubation.id,
            actor=actor,
            details={"project_id": project.id, "target": target},
        )

    logger.info(
        "Project nominated for incubation",
        extra={"resource_id": incubation.id, "project_id": project.id, "user_id": actor.id},
    )
    return incubation


def collect_updates(data: dict) -> dict:
    """Pick the supplied incubation fields out of a PATCH body.

    ``status`` and ``notes`` count only when non-empty; ``maturity_score``
    counts whenever present and not null (0 is a valid score).
    """
    updates: dict = {}
    status = data.get("status")
    if status:
        if status not in INCUBATION_STATUSES:
            raise ValidationError(
                f"Invalid status '{status}'",
                details={"status": f"must be one of: {', '.join(INCUBATION_STATUSES)}"},
            )
        updates["status"] = status
    if data.get("maturity_score") is not None:
        updates["maturity_score"] = _parse_maturity(data["maturity_score"])
    notes = optional_text(data.get("notes"), "notes")
    if notes:
        updates["notes"] = notes
    return updates


def update_incubation(incubation_id: str, data: dict, actor: User) -> IncubationProject:
    """Apply a partial update; the audit row records the supplied fields."""
    updates = collect_updates(data or {})
    if not updates:
        raise ValidationError("No updates provided")

    incubation = get_or_404(IncubationProject, incubation_id, label="Incubation project")

    with atomic():
        for field, value in updates.items():
            setattr(incubation, field, value)
        write_audit(
            action="update_incubation",
            resource_type="incubation_project",
            resource_id=incubation.id,
            actor=actor,
            details=updates,
        )

    logger.info(
        "Incubation updated: %s", ", ".join(sorted(updates)),
        extra={"resource_id": incubation.id, "user_id": actor.id},
    )
    return incubation


def list_incubations(arsenal_ready: bool | None = None) -> list[IncubationProject]:
    """All incubation rows with their project, newest first.

    ``arsenal_ready=True`` keeps rows scoring at least the Arsenal
    threshold; ``False`` keeps the rest.
    """
    q = IncubationProject.query.join(Project, IncubationProject.project_id == Project.id)
    if arsenal_ready is True:
        q = q.filter(IncubationProject.maturity_score >= ARSENAL_READY_THRESHOLD)
    elif arsenal_ready is False:
        q = q.filter(IncubationProject.maturity_score < ARSENAL_READY_THRESHOLD)
    return q.order_by(IncubationProject.created_at.desc()).all()
