"""REST API endpoints exposing the static RPA catalog."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..errors import NotFoundError, ValidationError
from ..extensions import limiter
from ..rpa.runner import get_runner
from ..rpa.service import get_service
from .workflows import _execute_rate_limit, _json_error, _still_running

bp = Blueprint("catalog", __name__)


@bp.get("/rpa/actions")
def list_action_types() -> tuple[object, int]:
    action_types = get_service(current_app).list_action_types()
    return jsonify([item.to_dict() for item in action_types]), HTTPStatus.OK


@bp.get("/rpa/platforms")
def list_platforms() -> tuple[object, int]:
    platforms = get_service(current_app).list_platforms()
    return jsonify([item.to_dict() for item in platforms]), HTTPStatus.OK


@bp.get("/rpa/platforms/<platform_id>")
def get_platform(platform_id: str) -> tuple[object, int]:
    try:
        platform = get_service(current_app).get_platform(platform_id)
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)
    return jsonify(platform.to_dict()), HTTPStatus.OK


@bp.get("/rpa/templates")
def list_templates() -> tuple[object, int]:
    templates = get_service(current_app).list_templates()
    return jsonify([item.to_dict() for item in templates]), HTTPStatus.OK


@bp.get("/rpa/templates/<template_id>")
def get_template(template_id: str) -> tuple[object, int]:
    try:
        template = get_service(current_app).get_template(template_id)
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)
    return jsonify(template.to_dict()), HTTPStatus.OK


@bp.get("/rpa/schedule-config")
def get_schedule_config() -> tuple[object, int]:
    return jsonify(get_service(current_app).get_schedule_config()), HTTPStatus.OK


@bp.post("/rpa/test-connection")
@limiter.limit(_execute_rate_limit)
def test_connection() -> tuple[object, int]:
    payload = request.get_json(silent=True, force=True) or {}
    if not isinstance(payload, dict):
        return _json_error("payload must be an object")

    platform_id = payload.get("platformId")
    credentials = payload.get("credentials")
    if not isinstance(platform_id, str) or not platform_id.strip():
        return _json_error("Platform ID is required")
    if credentials is not None and not isinstance(credentials, dict):
        return _json_error("credentials must be an object")

    service = get_service(current_app)
    try:
        result = get_runner(current_app).run(
            service.test_connection(platform_id.strip(), credentials)
        )
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)
    except ValidationError as exc:
        return _json_error(str(exc))
    except TimeoutError:
        return _still_running("Connection test still in progress")
    return jsonify(result), HTTPStatus.OK
