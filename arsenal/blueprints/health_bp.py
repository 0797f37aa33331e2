"""
Health check blueprint.

Endpoints:
    GET /health  — liveness, always 200 while the process is up
    GET /ready   — readiness, 503 when the database is unreachable
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from arsenal.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Readiness probe with database round-trip latency."""
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
    except Exception as exc:
        db.session.rollback()
        logger.error("Readiness check — database failed: %s", exc)
        return jsonify({"status": "not ready", "database": "unreachable", "error": str(exc)}), 503

    return jsonify({
        "status": "ready",
        "database": "connected",
        "latency_ms": round(db_ms, 1),
    }), 200
