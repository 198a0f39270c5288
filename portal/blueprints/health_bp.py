"""
Health check blueprint.

Endpoints:
    GET /api/health/ready : simple 200 for load balancers
    GET /api/health/live  : database and data directory status
"""

import logging
import os
import time

from flask import Blueprint, current_app, jsonify

from portal.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check with dependency status."""
    checks = {}
    overall = True

    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
    except Exception as exc:
        checks["database"] = {"status": "error"}
        overall = False
        logger.error("Health check: database failed: %s", exc)

    data_dir = current_app.config["DATA_DIR"]
    if os.path.isdir(data_dir) and os.access(data_dir, os.W_OK):
        checks["data_dir"] = {"status": "ok"}
    else:
        checks["data_dir"] = {"status": "error"}
        overall = False

    checks["backend"] = {
        "status": "ok" if current_app.config.get("BACKEND_URL") else "not_configured",
    }

    status_code = 200 if overall else 503
    return jsonify({"status": "ok" if overall else "degraded", "checks": checks}), status_code
