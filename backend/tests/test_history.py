"""Tests for the in-memory run history."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from backend.otobook.rpa.domain import RunRecord, RunStatus
from backend.otobook.rpa.history import InMemoryRunHistory

_START = datetime(2024, 1, 1, tzinfo=UTC)


def _record(index: int, workflow_id: str = "wf_a") -> RunRecord:
    return RunRecord(
        run_id=f"run_{index}",
        workflow_id=workflow_id,
        workflow_name="Workflow",
        start_time=_START + timedelta(seconds=index),
        end_time=_START + timedelta(seconds=index, milliseconds=500),
        total_steps=1,
        completed_steps=1,
        status=RunStatus.COMPLETED,
    )


def test_query_returns_most_recent_first():
    history = InMemoryRunHistory()
    for index in range(5):
        history.append(_record(index))

    records = history.query(limit=2)

    assert [record.run_id for record in records] == ["run_4", "run_3"]


def test_query_filters_by_workflow():
    history = InMemoryRunHistory()
    history.append(_record(1, "wf_a"))
    history.append(_record(2, "wf_b"))
    history.append(_record(3, "wf_a"))

    assert [record.run_id for record in history.query("wf_a")] == ["run_3", "run_1"]
    assert [record.run_id for record in history.query("wf_b")] == ["run_2"]
    assert history.query("wf_missing") == []


def test_query_with_non_positive_limit_is_empty():
    history = InMemoryRunHistory()
    history.append(_record(1))

    assert history.query(limit=0) == []
    assert history.query(limit=-3) == []


def test_records_cannot_be_changed_through_the_store():
    history = InMemoryRunHistory()
    record = _record(1)
    history.append(record)

    record.status = RunStatus.FAILED
    history.query()[0].error = "mutated"

    stored = history.query()[0]
    assert stored.status is RunStatus.COMPLETED
    assert stored.error is None
    assert len(history) == 1


def test_record_to_dict_omits_error_when_unset():
    payload = _record(1).to_dict()

    assert "error" not in payload
    assert payload["status"] == "completed"
    assert payload["startTime"] == "2024-01-01T00:00:01Z"
    assert payload["endTime"] == "2024-01-01T00:00:01.500000Z"
