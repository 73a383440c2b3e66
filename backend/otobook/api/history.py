"""API endpoint exposing workflow run history."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..rpa.service import get_service

bp = Blueprint("history", __name__)


@bp.get("/rpa/history")
def get_run_history() -> tuple[object, int]:
    workflow_id = (request.args.get("workflowId") or "").strip() or None
    default_limit = int(current_app.config.get("RPA_HISTORY_DEFAULT_LIMIT", 50))
    max_limit = int(current_app.config.get("RPA_HISTORY_MAX_LIMIT", 500))
    limit = request.args.get("limit", type=int) or default_limit
    limit = max(1, min(limit, max_limit))

    records = get_service(current_app).get_run_history(workflow_id, limit)
    return jsonify([record.to_dict() for record in records]), HTTPStatus.OK
