"""Health check endpoint."""

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health() -> tuple[dict[str, str], int]:
    """Return the service health status and the active workflow store."""
    return jsonify({"status": "ok", "store": current_app.config.get("RPA_STORE", "memory")}), 200
