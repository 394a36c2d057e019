from flask import Blueprint, jsonify
from .db import check_db_connection

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    """Liveness check with database connectivity check"""
    healthy, message = check_db_connection()
    body = {
        "ok": healthy,
        "database": {"healthy": healthy, "message": message},
    }
    return jsonify(body), 200 if healthy else 503
