"""REST API endpoints for managing and executing RPA workflows."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from ..errors import NotFoundError, ValidationError
from ..extensions import limiter
from ..rpa.domain import Workflow
from ..rpa.runner import get_runner
from ..rpa.service import get_service

bp = Blueprint("workflows", __name__)


def _json_error(message: str, status: HTTPStatus = HTTPStatus.BAD_REQUEST):
    return jsonify({"error": message}), status


def _validation_error(exc: ValidationError):
    return jsonify({"errors": exc.errors}), HTTPStatus.BAD_REQUEST


def _still_running(message: str):
    current_app.logger.warning("%s after %ss", message, current_app.config.get("RPA_EXECUTION_TIMEOUT"))
    return _json_error(message, HTTPStatus.GATEWAY_TIMEOUT)


def _execute_rate_limit() -> str:
    return current_app.config.get("RPA_EXECUTE_RATE_LIMIT", "30 per minute")


def _serialize_workflow(workflow: Workflow) -> dict[str, Any]:
    return workflow.to_dict()


def _request_object() -> dict[str, Any] | None:
    payload = request.get_json(silent=True, force=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        return None
    return payload


@bp.post("/rpa/workflows")
def create_workflow() -> tuple[object, int]:
    payload = _request_object()
    if payload is None:
        return _json_error("payload must be an object")

    service = get_service(current_app)
    template_id = payload.get("templateId")
    try:
        if template_id:
            workflow = service.create_workflow_from_template(str(template_id), payload)
        else:
            workflow = service.create_workflow(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)

    current_app.logger.info("Created workflow %s (%s)", workflow.id, workflow.name)
    return jsonify(_serialize_workflow(workflow)), HTTPStatus.CREATED


@bp.get("/rpa/workflows")
def list_workflows() -> tuple[object, int]:
    workflows = get_service(current_app).list_workflows()
    return jsonify([_serialize_workflow(workflow) for workflow in workflows]), HTTPStatus.OK


@bp.get("/rpa/workflows/<workflow_id>")
def get_workflow(workflow_id: str) -> tuple[object, int]:
    try:
        workflow = get_service(current_app).get_workflow(workflow_id)
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)
    return jsonify(_serialize_workflow(workflow)), HTTPStatus.OK


@bp.put("/rpa/workflows/<workflow_id>")
def update_workflow(workflow_id: str) -> tuple[object, int]:
    payload = _request_object()
    if payload is None:
        return _json_error("payload must be an object")

    try:
        workflow = get_service(current_app).update_workflow(workflow_id, payload)
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)
    except ValidationError as exc:
        return _validation_error(exc)
    return jsonify(_serialize_workflow(workflow)), HTTPStatus.OK


@bp.delete("/rpa/workflows/<workflow_id>")
def delete_workflow(workflow_id: str) -> tuple[object, int]:
    try:
        result = get_service(current_app).delete_workflow(workflow_id)
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)
    current_app.logger.info("Deleted workflow %s", workflow_id)
    return jsonify(result), HTTPStatus.OK


@bp.post("/rpa/workflows/<workflow_id>/execute")
@limiter.limit(_execute_rate_limit)
def execute_workflow(workflow_id: str) -> tuple[object, int]:
    options = _request_object()
    if options is None:
        return _json_error("options must be an object")

    service = get_service(current_app)
    runner = get_runner(current_app)
    try:
        record = runner.run(service.execute_workflow(workflow_id, options))
    except NotFoundError as exc:
        return _json_error(str(exc), HTTPStatus.NOT_FOUND)
    except TimeoutError:
        return _still_running("Run still in progress; its record will appear in the run history")
    return jsonify(record.to_dict()), HTTPStatus.OK
