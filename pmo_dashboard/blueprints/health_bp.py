"""
Health check blueprint.

Endpoints:
    GET /health          — {status: OK | DB_DISCONNECTED, timestamp, environment}
    GET /api/v1/health   — same payload under the API prefix
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from pmo_dashboard.config import get_settings
from pmo_dashboard.services.data_access import DataAccess

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__)


@health_bp.route("/health", methods=["GET"])
@health_bp.route("/api/v1/health", methods=["GET"])
def health():
    """Liveness plus a storage round-trip. Always 200 so monitors can read the body."""
    db_ok = DataAccess().ping()
    if not db_ok:
        logger.error("Health check: database unreachable")
    return jsonify({
        "success": db_ok,
        "status": "OK" if db_ok else "DB_DISCONNECTED",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": get_settings().environment,
    }), 200
