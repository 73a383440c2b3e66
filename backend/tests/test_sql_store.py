"""Tests for the Flask-SQLAlchemy backed workflow registry and run history."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from backend.otobook.errors import NotFoundError, ValidationError
from backend.otobook.rpa.domain import RunStatus
from backend.otobook.rpa.registry import InMemoryWorkflowRegistry
from backend.otobook.rpa.service import RpaService
from backend.otobook.rpa.sql_store import SqlRunHistory, SqlWorkflowRegistry


@pytest.fixture()
def registry(app, executors):
    return SqlWorkflowRegistry(app, executors.validate_step)


@pytest.fixture()
def history(app):
    return SqlRunHistory(app)


@pytest.fixture()
def sql_service(registry, history, executors):
    return RpaService(registry, history, executors, connection_delay=(0.0, 0.0))


def _payload(name="Stored workflow"):
    return {
        "name": name,
        "description": "Persisted",
        "steps": [
            {"type": "api", "action": "get", "config": {"source": "wordpress"}},
            {"type": "api", "action": "post", "config": {"targets": ["airtable"]}},
        ],
        "schedule": {"type": "interval", "value": 300, "unit": "seconds"},
        "platformConnections": {"airtable": {"baseId": "app123"}},
    }


def test_workflow_roundtrip(registry):
    created = registry.create(_payload())

    fetched = registry.get(created.id)

    assert fetched.name == "Stored workflow"
    assert fetched.description == "Persisted"
    assert [step.to_dict() for step in fetched.steps] == [step.to_dict() for step in created.steps]
    assert fetched.schedule == {"type": "interval", "value": 300, "unit": "seconds"}
    assert fetched.platform_connections == {"airtable": {"baseId": "app123"}}
    assert fetched.created_at.tzinfo is not None
    assert any(workflow.id == created.id for workflow in registry.list())


def test_invalid_workflow_is_not_stored(registry):
    before = len(registry.list())

    with pytest.raises(ValidationError):
        registry.create({"name": "", "steps": []})

    assert len(registry.list()) == before


def test_update_and_delete(registry):
    created = registry.create(_payload("Editable"))

    updated = registry.update(created.id, {"name": "Edited", "steps": []})

    assert updated.name == "Edited"
    assert updated.steps == []
    assert registry.get(created.id).name == "Edited"

    registry.delete(created.id)
    with pytest.raises(NotFoundError):
        registry.get(created.id)
    with pytest.raises(NotFoundError):
        registry.delete(created.id)


def test_record_run_completion_is_cumulative(registry):
    created = registry.create(_payload("Counted"))
    when = datetime(2024, 6, 1, 8, 30, tzinfo=UTC)

    registry.record_run_completion(created.id, when)
    registry.record_run_completion(created.id, when)

    stored = registry.get(created.id)
    assert stored.run_count == 2
    assert stored.last_run == when
    with pytest.raises(NotFoundError):
        registry.record_run_completion("wf_missing", when)


def test_execution_against_sql_stores(sql_service):
    workflow = sql_service.create_workflow(_payload("Executed"))

    first = asyncio.run(sql_service.execute_workflow(workflow.id))
    second = asyncio.run(sql_service.execute_workflow(workflow.id, {"stopOnError": True}))

    assert first.status is RunStatus.COMPLETED
    history = sql_service.get_run_history(workflow.id, limit=10)
    assert [entry.run_id for entry in history] == [second.run_id, first.run_id]
    assert history[0].options == {"stopOnError": True}
    assert history[1].steps[0].output["source"] == "wordpress"
    assert history[1].steps[0].timestamp == first.steps[0].timestamp
    assert sql_service.get_workflow(workflow.id).run_count == 2


def test_sql_history_outlives_workflow(sql_service):
    workflow = sql_service.create_workflow(_payload("Short lived"))
    record = asyncio.run(sql_service.execute_workflow(workflow.id))

    sql_service.delete_workflow(workflow.id)

    assert [entry.run_id for entry in sql_service.get_run_history(workflow.id)] == [record.run_id]
    assert sql_service.get_run_history(workflow.id, limit=0) == []


def test_failed_run_keeps_error(sql_service):
    workflow = sql_service.create_workflow(
        {"name": "Broken", "steps": [{"type": "ocr", "action": "bogus_action"}]}
    )

    record = asyncio.run(sql_service.execute_workflow(workflow.id, {"stopOnError": True}))

    stored = sql_service.get_run_history(workflow.id)[0]
    assert stored.run_id == record.run_id
    assert stored.status is RunStatus.FAILED
    assert stored.error == "Step 1 failed: Unknown OCR action: bogus_action"
    assert stored.steps[0].error == "Unknown OCR action: bogus_action"


@pytest.fixture(params=["memory", "sql"])
def either_registry(request, app, executors):
    if request.param == "sql":
        return SqlWorkflowRegistry(app, executors.validate_step)
    return InMemoryWorkflowRegistry(executors.validate_step)


@pytest.mark.parametrize(
    ("partial", "message"),
    [
        ({"name": None}, "name must be a non-empty string"),
        ({"name": "  "}, "name must be a non-empty string"),
        ({"status": None}, "status must be a non-empty string"),
        ({"status": 3}, "status must be a non-empty string"),
        ({"description": {"a": 1}}, "description must be a string"),
    ],
)
def test_unstorable_updates_are_rejected_by_both_stores(either_registry, partial, message):
    created = either_registry.create(_payload("Guarded"))

    with pytest.raises(ValidationError) as excinfo:
        either_registry.update(created.id, partial)

    assert excinfo.value.errors == [message]
    stored = either_registry.get(created.id)
    assert stored.name == "Guarded"
    assert stored.status == "active"
    assert stored.description == "Persisted"


def test_storable_updates_agree_across_stores(either_registry):
    created = either_registry.create(_payload("Agreed"))

    updated = either_registry.update(
        created.id,
        {"name": " Renamed ", "status": "paused", "description": None, "schedule": None},
    )

    assert updated.name == "Renamed"
    assert updated.status == "paused"
    assert updated.description is None
    assert updated.schedule is None
    assert either_registry.get(created.id).status == "paused"
