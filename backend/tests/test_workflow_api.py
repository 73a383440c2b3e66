"""Tests for the workflow REST API."""

from __future__ import annotations

import time

import pytest
from sqlalchemy.pool import StaticPool

from backend.otobook.rpa.service import get_service
from otobook import Config, create_app


def _create(client, **overrides):
    payload = {
        "name": "Invoice intake",
        "steps": [
            {"type": "ocr", "action": "extract_form", "config": {"provider": "tesseract"}},
            {"type": "data", "action": "validate", "config": {"schema": "invoice"}},
        ],
    }
    payload.update(overrides)
    response = client.post("/api/rpa/workflows", json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_workflow_roundtrip(client):
    created = _create(client, description="Scan invoices")
    assert created["id"].startswith("wf_")
    assert created["status"] == "active"
    assert created["runCount"] == 0
    assert created["lastRun"] is None

    list_response = client.get("/api/rpa/workflows")
    assert list_response.status_code == 200
    assert any(workflow["id"] == created["id"] for workflow in list_response.get_json())

    detail_response = client.get(f"/api/rpa/workflows/{created['id']}")
    assert detail_response.status_code == 200
    assert detail_response.get_json()["description"] == "Scan invoices"

    update_response = client.put(
        f"/api/rpa/workflows/{created['id']}",
        json={"name": "Invoice intake v2", "runCount": 50},
    )
    assert update_response.status_code == 200
    updated = update_response.get_json()
    assert updated["name"] == "Invoice intake v2"
    assert updated["runCount"] == 0
    assert updated["createdAt"] == created["createdAt"]

    delete_response = client.delete(f"/api/rpa/workflows/{created['id']}")
    assert delete_response.status_code == 200
    assert delete_response.get_json() == {"success": True, "message": "Workflow deleted"}

    missing_response = client.get(f"/api/rpa/workflows/{created['id']}")
    assert missing_response.status_code == 404
    assert missing_response.get_json() == {"error": f"Workflow {created['id']} not found"}


def test_create_workflow_validation_errors(client):
    response = client.post("/api/rpa/workflows", json={"steps": []})

    assert response.status_code == 400
    assert response.get_json() == {
        "errors": ["name is required", "steps must contain at least one step"]
    }


def test_create_workflow_rejects_non_object_payload(client):
    response = client.post("/api/rpa/workflows", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.get_json() == {"error": "payload must be an object"}


def test_create_workflow_from_template(client):
    response = client.post(
        "/api/rpa/workflows",
        json={"templateId": "web_scraping", "name": "Competitor prices"},
    )

    assert response.status_code == 201
    workflow = response.get_json()
    assert workflow["name"] == "Competitor prices"
    assert [step["action"] for step in workflow["steps"]] == ["navigate", "extract_data", "post"]

    missing = client.post("/api/rpa/workflows", json={"templateId": "missing"})
    assert missing.status_code == 404


@pytest.mark.parametrize(
    ("method", "suffix"),
    [("put", ""), ("delete", ""), ("post", "/execute")],
)
def test_unknown_workflow_returns_404(client, method, suffix):
    response = getattr(client, method)(f"/api/rpa/workflows/wf_missing{suffix}", json={})

    assert response.status_code == 404
    assert response.get_json() == {"error": "Workflow wf_missing not found"}


def test_update_with_invalid_steps(client):
    created = _create(client)

    response = client.put(f"/api/rpa/workflows/{created['id']}", json={"steps": "nope"})

    assert response.status_code == 400
    assert response.get_json() == {"errors": ["steps must be a list"]}


def test_execute_workflow_returns_run_record(client):
    created = _create(client)

    response = client.post(f"/api/rpa/workflows/{created['id']}/execute", json={})

    assert response.status_code == 200
    record = response.get_json()
    assert record["runId"].startswith("run_")
    assert record["workflowId"] == created["id"]
    assert record["status"] == "completed"
    assert record["totalSteps"] == 2
    assert record["completedSteps"] == 2
    assert record["failedSteps"] == 0
    assert [step["stepNumber"] for step in record["steps"]] == [1, 2]
    assert "error" not in record

    detail = client.get(f"/api/rpa/workflows/{created['id']}").get_json()
    assert detail["runCount"] == 1
    assert detail["lastRun"] == record["endTime"]


def test_execute_without_body(client):
    created = _create(client)

    response = client.post(f"/api/rpa/workflows/{created['id']}/execute")

    assert response.status_code == 200
    assert response.get_json()["options"] == {}


def test_execute_with_stop_on_error(client):
    created = _create(client, steps=[{"type": "ocr", "action": "bogus_action"}])

    response = client.post(
        f"/api/rpa/workflows/{created['id']}/execute", json={"stopOnError": True}
    )

    assert response.status_code == 200
    record = response.get_json()
    assert record["status"] == "failed"
    assert record["error"] == "Step 1 failed: Unknown OCR action: bogus_action"
    assert record["steps"][0]["status"] == "failed"


def test_history_endpoint(client):
    created = _create(client)
    run_ids = [
        client.post(f"/api/rpa/workflows/{created['id']}/execute", json={}).get_json()["runId"]
        for _ in range(5)
    ]

    response = client.get(f"/api/rpa/history?workflowId={created['id']}&limit=2")

    assert response.status_code == 200
    assert [record["runId"] for record in response.get_json()] == [run_ids[4], run_ids[3]]

    client.delete(f"/api/rpa/workflows/{created['id']}")
    after_delete = client.get(f"/api/rpa/history?workflowId={created['id']}")
    assert [record["runId"] for record in after_delete.get_json()] == list(reversed(run_ids))


def test_history_limit_is_clamped(client, app):
    response = client.get("/api/rpa/history?limit=100000")

    assert response.status_code == 200
    assert len(response.get_json()) <= app.config["RPA_HISTORY_MAX_LIMIT"]


def test_demo_endpoint(client):
    before = client.get("/api/rpa/workflows").get_json()

    response = client.post("/api/rpa/demo", json={"templateId": "data_backup"})

    assert response.status_code == 200
    result = response.get_json()
    assert result["isDemo"] is True
    assert result["workflowName"] == "Demo: Data Backup"
    assert client.get("/api/rpa/workflows").get_json() == before

    missing = client.post("/api/rpa/demo", json={"templateId": "missing"})
    assert missing.status_code == 404


def test_update_rejects_null_name(client):
    created = _create(client)

    response = client.put(f"/api/rpa/workflows/{created['id']}", json={"name": None})

    assert response.status_code == 400
    assert response.get_json() == {"errors": ["name must be a non-empty string"]}
    assert client.get(f"/api/rpa/workflows/{created['id']}").get_json()["name"] == "Invoice intake"


class SlowRunConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    DB_INIT_MAX_RETRIES = 1
    RATELIMIT_ENABLED = False
    RPA_STORE = "memory"
    RPA_STEP_LATENCY_MIN = 0.3
    RPA_STEP_LATENCY_MAX = 0.3
    RPA_CONNECTION_DELAY_MIN = 0.3
    RPA_CONNECTION_DELAY_MAX = 0.3
    RPA_EXECUTION_TIMEOUT = 0.05


@pytest.fixture()
def slow_app():
    app = create_app(SlowRunConfig)
    yield app
    runner = app.extensions.get("otobook_runner")
    if runner is not None:
        runner.close()


def _wait_for_history(service, workflow_id, expected=1, attempts=100):
    for _ in range(attempts):
        history = service.get_run_history(workflow_id)
        if len(history) >= expected:
            return history
        time.sleep(0.05)
    return service.get_run_history(workflow_id)


def test_execute_reports_run_still_in_progress_on_timeout(slow_app):
    client = slow_app.test_client()
    service = get_service(slow_app)
    workflow = service.create_workflow(
        {"name": "Slow", "steps": [{"type": "file", "action": "read"}, {"type": "file", "action": "write"}]}
    )

    response = client.post(f"/api/rpa/workflows/{workflow.id}/execute", json={})

    assert response.status_code == 504
    assert response.get_json() == {
        "error": "Run still in progress; its record will appear in the run history"
    }
    history = _wait_for_history(service, workflow.id)
    assert [record.status.value for record in history] == ["completed"]


def test_test_connection_reports_timeout(slow_app):
    client = slow_app.test_client()

    response = client.post("/api/rpa/test-connection", json={"platformId": "notion"})

    assert response.status_code == 504
    assert response.get_json() == {"error": "Connection test still in progress"}
    # Let the pending check finish before the runner loop is closed.
    time.sleep(0.4)
