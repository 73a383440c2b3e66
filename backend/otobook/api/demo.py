"""Demo trigger running a throwaway copy of a workflow template."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..errors import NotFoundError
from ..extensions import limiter
from ..rpa.runner import get_runner
from ..rpa.service import get_service
from .workflows import _execute_rate_limit, _json_error, _still_running

bp = Blueprint("demo", __name__)


@bp.post("/rpa/demo")
@limiter.limit(_execute_rate_limit)
def demo_execute() -> tuple[object, int]:
    payload = request.get_json(silent=True, force=True) or {}
    if not isinstance(payload, dict):
        return _json_error("payload must be an object")

    template_id = payload.get("templateId")
    if template_id is not None and not isinstance(template_id, str):
        return _json_error("templateId must be a string")

    service = get_service(current_app)
    try:
        result = get_runner(current_app).run(service.demo_execute(template_id))
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)
    except TimeoutError:
        return _still_running("Demo run still in progress; its record will appear in the run history")
    return jsonify(result), HTTPStatus.OK
