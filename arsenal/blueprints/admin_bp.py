"""
Arsenal Showcase API
Admin blueprint — incubation pipeline and audit trail (moderator+).

Endpoints:
    POST  /api/admin/incubation/nominate   — nominate a project
    PATCH /api/admin/incubation/<id>       — partial update (status, maturity_score, notes)
    GET   /api/admin/incubation            — list (?arsenal_ready=true)
    GET   /api/admin/audit                 — audit log, newest first
"""

from flask import Blueprint, jsonify, request

from arsenal.blueprints import paginate_query
from arsenal.core.exceptions import ValidationError
from arsenal.middleware.permission_required import current_user, require_role
from arsenal.models.audit import AuditLogEntry
from arsenal.services import incubation_service
from arsenal.utils.helpers import parse_bool

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


# ── Incubation ───────────────────────────────────────────────────────────────

@admin_bp.route("/incubation/nominate", methods=["POST"])
@require_role("moderator")
def nominate():
    data = request.get_json(silent=True) or {}
    project_id = data.get("project_id")
    if not project_id or not isinstance(project_id, str):
        raise ValidationError("project_id is required", details={"project_id": "required"})
    incubation = incubation_service.nominate(
        project_id, data.get("target"), actor=current_user(), notes=data.get("notes"),
    )
    return jsonify({"incubation": incubation.to_dict(include_project=True)}), 201


@admin_bp.route("/incubation/<incubation_id>", methods=["PATCH"])
@require_role("moderator")
def update_incubation(incubation_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    incubation = incubation_service.update_incubation(incubation_id, data, actor=current_user())
    return jsonify({"incubation": incubation.to_dict(include_project=True)})


@admin_bp.route("/incubation", methods=["GET"])
@require_role("moderator")
def list_incubations():
    raw = request.args.get("arsenal_ready")
    arsenal_ready = None if raw is None else parse_bool(raw)
    rows = incubation_service.list_incubations(arsenal_ready=arsenal_ready)
    return jsonify({"incubations": [i.to_dict(include_project=True) for i in rows]})


# ── Audit ────────────────────────────────────────────────────────────────────

@admin_bp.route("/audit", methods=["GET"])
@require_role("moderator")
def list_audit_logs():
    """
    Query params:
        action         — exact action tag
        resource_type  — submission | project | incubation_project
        resource_id    — PK of the acted-upon entity
        limit          — default 50
        offset         — default 0
    """
    q = AuditLogEntry.query

    action = request.args.get("action")
    if action:
        q = q.filter(AuditLogEntry.action == action)

    resource_type = request.args.get("resource_type")
    if resource_type:
        q = q.filter(AuditLogEntry.resource_type == resource_type)

    resource_id = request.args.get("resource_id")
    if resource_id:
        q = q.filter(AuditLogEntry.resource_id == resource_id)

    q = q.order_by(AuditLogEntry.created_at.desc())
    items, total, limit, offset = paginate_query(q)

    return jsonify({
        "audit_logs": [entry.to_dict() for entry in items],
        "total": total,
        "limit": limit,
        "offset": offset,
    })
