"""
Arsenal Showcase API
Projects blueprint — public directory.

Endpoints:
    GET  /api/projects                 — list (product, theatre, status, search)
    GET  /api/projects/<id_or_name>    — single project by id or unique name
    POST /api/projects                 — create a directory entry directly
"""

from flask import Blueprint, jsonify, request

from arsenal.middleware.permission_required import current_user, login_required
from arsenal.services import project_service

projects_bp = Blueprint("projects", __name__, url_prefix="/api/projects")


@projects_bp.route("", methods=["GET"])
def list_projects():
    """
    Query params:
        product  — exact product match
        theatre  — exact theatre match
        status   — defaults to ``published``
        search   — case-insensitive substring of name or description
    """
    projects = project_service.list_projects(
        product=request.args.get("product"),
        theatre=request.args.get("theatre"),
        status=request.args.get("status", "published"),
        search=request.args.get("search"),
    )
    return jsonify({"projects": [p.to_dict() for p in projects], "total": len(projects)})


@projects_bp.route("/<id_or_name>", methods=["GET"])
def get_project(id_or_name):
    project = project_service.get_project(id_or_name)
    return jsonify({"project": project.to_dict()})


@projects_bp.route("", methods=["POST"])
@login_required
def create_project():
    data = request.get_json(silent=True)
    project = project_service.create_project(data, actor=current_user())
    return jsonify({"project": project.to_dict()}), 201
