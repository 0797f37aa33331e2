"""
Arsenal Showcase API
Users blueprint.

Endpoints:
    GET /api/users        — all users, newest first (signed-in callers)
    GET /api/users/<id>   — single user (signed-in callers)
"""

from flask import Blueprint, jsonify

from arsenal.middleware.permission_required import login_required
from arsenal.services import user_service

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("", methods=["GET"])
@login_required
def list_users():
    return jsonify({"users": [u.to_dict() for u in user_service.list_users()]})


@users_bp.route("/<user_id>", methods=["GET"])
@login_required
def get_user(user_id):
    return jsonify({"user": user_service.get_user(user_id).to_dict()})
