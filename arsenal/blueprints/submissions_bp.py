"""
Arsenal Showcase API
Submissions blueprint — author drafts and the review queue.

Endpoints (author):
    POST   /api/submissions                        — create draft
    GET    /api/submissions/mine                   — caller's own submissions
    GET    /api/submissions/<id>                   — owner or moderator+
    PATCH  /api/submissions/<id>                   — edit draft / needs-work payload
    POST   /api/submissions/<id>/submit            — draft | needs-work → pending-review

Endpoints (moderator+):
    GET    /api/submissions                        — review queue (?status=)
    POST   /api/submissions/<id>/approve           — {publish_immediately: true}
    POST   /api/submissions/<id>/reject            — {reason, notes}
    POST   /api/submissions/<id>/request-changes   — {notes}
"""

from flask import Blueprint, jsonify, request

from arsenal.middleware.permission_required import current_user, login_required, require_role
from arsenal.services import submission_lifecycle
from arsenal.utils.helpers import require_bool

submissions_bp = Blueprint("submissions", __name__, url_prefix="/api/submissions")


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ── Review queue ─────────────────────────────────────────────────────────────

@submissions_bp.route("", methods=["GET"])
@require_role("moderator")
def list_submissions():
    submissions = submission_lifecycle.list_submissions(status=request.args.get("status"))
    return jsonify({
        "submissions": [s.to_dict() for s in submissions],
        "total": len(submissions),
    })


@submissions_bp.route("/mine", methods=["GET"])
@login_required
def my_submissions():
    submissions = submission_lifecycle.list_submissions(
        status=request.args.get("status"), submitted_by=current_user().id,
    )
    return jsonify({
        "submissions": [s.to_dict() for s in submissions],
        "total": len(submissions),
    })


# ── Author actions ───────────────────────────────────────────────────────────

@submissions_bp.route("", methods=["POST"])
@login_required
def create_submission():
    """Body is either ``{"data": {...}}`` or the payload object itself."""
    body = request.get_json(silent=True)
    data = body.get("data", body) if isinstance(body, dict) else body
    submission = submission_lifecycle.create_submission(data, actor=current_user())
    return jsonify({"submission": submission.to_dict()}), 201


@submissions_bp.route("/<submission_id>", methods=["GET"])
@login_required
def get_submission(submission_id):
    submission = submission_lifecycle.get_submission(submission_id, actor=current_user())
    return jsonify({"submission": submission.to_dict()})


@submissions_bp.route("/<submission_id>", methods=["PATCH"])
@login_required
def update_submission(submission_id):
    body = request.get_json(silent=True)
    data = body.get("data", body) if isinstance(body, dict) else body
    submission = submission_lifecycle.update_submission(submission_id, data, actor=current_user())
    return jsonify({"submission": submission.to_dict()})


@submissions_bp.route("/<submission_id>/submit", methods=["POST"])
@login_required
def submit_for_review(submission_id):
    submission = submission_lifecycle.submit_for_review(submission_id, actor=current_user())
    return jsonify({"submission": submission.to_dict()})


# ── Reviewer actions ─────────────────────────────────────────────────────────

@submissions_bp.route("/<submission_id>/approve", methods=["POST"])
@require_role("moderator")
def approve(submission_id):
    publish = require_bool(
        _body().get("publish_immediately"), "publish_immediately", default=True,
    )
    result = submission_lifecycle.approve(
        submission_id, actor=current_user(), publish_immediately=publish,
    )
    return jsonify({"success": True, **result})


@submissions_bp.route("/<submission_id>/reject", methods=["POST"])
@require_role("moderator")
def reject(submission_id):
    body = _body()
    submission = submission_lifecycle.reject(
        submission_id, actor=current_user(),
        reason=body.get("reason"), notes=body.get("notes"),
    )
    return jsonify({"success": True, "submission": submission.to_dict()})


@submissions_bp.route("/<submission_id>/request-changes", methods=["POST"])
@require_role("moderator")
def request_changes(submission_id):
    submission = submission_lifecycle.request_changes(
        submission_id, actor=current_user(), notes=_body().get("notes"),
    )
    return jsonify({"success": True, "submission": submission.to_dict()})
