"""
Project directory service — list, lookup and direct creation.

Approval of a submission creates projects too (see submission_lifecycle);
this module covers the public directory reads and the direct-create path.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import or_

from arsenal.core.exceptions import ConflictError, NotFoundError, ValidationError
from arsenal.models import db
from arsenal.models.audit import write_audit
from arsenal.models.project import FIELD_LENGTHS, PRODUCTS, PROJECT_STATUSES, Project
from arsenal.models.user import THEATRES, User
from arsenal.services.submission_schema import is_http_url
from arsenal.utils.helpers import atomic, optional_text

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("description", "link", "repo", "usecase", "language")


def list_projects(product=None, theatre=None, status="published", search=None) -> list[Project]:
    """Directory listing; published entries first by publication date."""
    q = Project.query
    if status:
        q = q.filter(Project.status == status)
    if product:
        q = q.filter(Project.product == product)
    if theatre:
        q = q.filter(Project.theatre == theatre)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(Project.name.ilike(pattern), Project.description.ilike(pattern)))
    return q.order_by(
        Project.published_at.desc().nulls_last(),
        Project.created_at.desc(),
    ).all()


def get_project(id_or_name: str) -> Project:
    """Look a project up by id, falling back to its unique name."""
    project = db.session.get(Project, id_or_name)
    if project is None:
        project = Project.query.filter_by(name=id_or_name).first()
    if project is None:
        raise NotFoundError(resource="Project", resource_id=id_or_name)
    return project


def _validate(data: dict) -> dict:
    errors = {}
    name = (data.get("name") or "").strip() if isinstance(data.get("name"), str) else ""
    if not name:
        errors["name"] = "Project name is required"
    elif len(name) > FIELD_LENGTHS["name"]:
        errors["name"] = f"Project name must be at most {FIELD_LENGTHS['name']} characters"

    status = data.get("status") or "draft"
    if status not in PROJECT_STATUSES:
        errors["status"] = f"Must be one of: {', '.join(PROJECT_STATUSES)}"
    product = data.get("product")
    if product and product not in PRODUCTS:
        errors["product"] = f"Must be one of: {', '.join(PRODUCTS)}"
    theatre = data.get("theatre")
    if theatre and theatre not in THEATRES:
        errors["theatre"] = f"Must be one of: {', '.join(THEATRES)}"
    link = data.get("link")
    if link and not (isinstance(link, str) and is_http_url(link)):
        errors["link"] = "Must be a valid URL"
    fields = {}
    for field in _TEXT_FIELDS:
        try:
            fields[field] = optional_text(data.get(field), field, FIELD_LENGTHS.get(field))
        except ValidationError as exc:
            errors.update(exc.details)
    for field in ("tags", "technical_stack"):
        value = data.get(field)
        if value is not None and not (
            isinstance(value, list) and all(isinstance(v, str) for v in value)
        ):
            errors[field] = "Must be a list of strings"

    if errors:
        raise ValidationError("Project data is invalid", details=errors)

    fields.update(
        name=name,
        status=status,
        product=product or None,
        theatre=theatre or None,
        tags=data.get("tags") or [],
        technical_stack=data.get("technical_stack") or [],
    )
    return fields


def create_project(data, actor: User) -> Project:
    """Create a directory entry owned by *actor*.

    Raises:
        ValidationError: bad or missing fields.
        ConflictError: a project with this name already exists.
    """
    if not isinstance(data, dict):
        raise ValidationError("Project data must be a JSON object")
    fields = _validate(data)
    conflict = ConflictError("Project", "name", fields["name"], message="Project name already exists")

    with atomic(conflict=conflict):
        project = Project(
            **fields,
            submitted_by=actor.id,
            published_at=datetime.now(timezone.utc) if fields["status"] == "published" else None,
        )
        db.session.add(project)
        db.session.flush()
        write_audit(
            action="create_project",
            resource_type="project",
            resource_id=project.id,
            actor=actor,
            details={"name": project.name, "status": project.status},
        )

    logger.info("Project created: %s", project.name,
                extra={"resource_id": project.id, "user_id": actor.id})
    return project
