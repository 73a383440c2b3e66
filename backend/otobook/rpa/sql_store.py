"""Workflow registry and run history backed by Flask-SQLAlchemy tables."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from flask import Flask

from ..errors import NotFoundError
from ..extensions import db
from ..models.runs import WorkflowRun
from ..models.workflow import Workflow as WorkflowRow
from .domain import (
    RunRecord,
    RunStatus,
    StepResult,
    Workflow,
    ensure_aware,
    parse_steps,
)
from .history import DEFAULT_HISTORY_LIMIT, RunHistory
from .registry import StepValidator, WorkflowRegistry


def _dump(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value)


def _load(text: str | None, default: Any = None) -> Any:
    if not text:
        return default
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return default


class _AppBound:
    """Run each store operation in its own app context and session.

    Store calls arrive from request threads and from the execution runner's
    loop thread, which has no app context of its own.
    """

    def __init__(self, app: Flask) -> None:
        self._app = app

    @contextmanager
    def _session(self) -> Iterator[Any]:
        with self._app.app_context():
            try:
                yield db.session
            except Exception:
                db.session.rollback()
                raise


def _workflow_from_row(row: WorkflowRow) -> Workflow:
    return Workflow(
        id=row.id,
        name=row.name,
        description=row.description,
        steps=parse_steps(_load(row.steps_json, [])),
        schedule=_load(row.schedule_json),
        platform_connections=_load(row.platform_connections_json),
        status=row.status,
        created_at=ensure_aware(row.created_at),
        updated_at=ensure_aware(row.updated_at),
        run_count=row.run_count,
        last_run=ensure_aware(row.last_run),
    )


class SqlWorkflowRegistry(_AppBound, WorkflowRegistry):
    """Persist workflows as rows of ``rpa_workflows``."""

    def __init__(self, app: Flask, step_validator: StepValidator | None = None) -> None:
        _AppBound.__init__(self, app)
        WorkflowRegistry.__init__(self, step_validator)

    def get(self, workflow_id: str) -> Workflow:
        with self._session() as session:
            row = session.get(WorkflowRow, workflow_id)
            if row is None:
                raise NotFoundError(f"Workflow {workflow_id} not found")
            return _workflow_from_row(row)

    def list(self) -> list[Workflow]:
        with self._session() as session:
            rows = session.execute(
                db.select(WorkflowRow).order_by(WorkflowRow.created_at.asc(), WorkflowRow.id.asc())
            ).scalars()
            return [_workflow_from_row(row) for row in rows]

    def delete(self, workflow_id: str) -> None:
        with self._session() as session:
            row = session.get(WorkflowRow, workflow_id)
            if row is None:
                raise NotFoundError(f"Workflow {workflow_id} not found")
            session.delete(row)
            session.commit()

    def record_run_completion(self, workflow_id: str, when: datetime) -> None:
        with self._session() as session:
            result = session.execute(
                db.update(WorkflowRow)
                .where(WorkflowRow.id == workflow_id)
                .values(run_count=WorkflowRow.run_count + 1, last_run=when)
            )
            if result.rowcount == 0:
                session.rollback()
                raise NotFoundError(f"Workflow {workflow_id} not found")
            session.commit()

    def _insert(self, workflow: Workflow) -> None:
        with self._session() as session:
            row = WorkflowRow(
                id=workflow.id,
                name=workflow.name,
                description=workflow.description,
                steps_json=json.dumps([step.to_dict() for step in workflow.steps]),
                schedule_json=_dump(workflow.schedule),
                platform_connections_json=_dump(workflow.platform_connections),
                status=workflow.status,
                run_count=workflow.run_count,
                last_run=workflow.last_run,
                created_at=workflow.created_at,
                updated_at=workflow.updated_at,
            )
            session.add(row)
            session.commit()

    def _apply_update(
        self, workflow_id: str, changes: dict[str, Any], when: datetime
    ) -> Workflow:
        with self._session() as session:
            row = session.get(WorkflowRow, workflow_id)
            if row is None:
                raise NotFoundError(f"Workflow {workflow_id} not found")
            for attribute, value in changes.items():
                if attribute == "steps":
                    row.steps_json = json.dumps([step.to_dict() for step in value])
                elif attribute == "schedule":
                    row.schedule_json = _dump(value)
                elif attribute == "platform_connections":
                    row.platform_connections_json = _dump(value)
                else:
                    setattr(row, attribute, value)
            row.updated_at = when
            session.commit()
            return _workflow_from_row(row)


def _record_from_row(row: WorkflowRun) -> RunRecord:
    return RunRecord(
        run_id=row.run_id,
        workflow_id=row.workflow_id,
        workflow_name=row.workflow_name,
        status=RunStatus(row.status),
        start_time=ensure_aware(row.start_time),
        end_time=ensure_aware(row.end_time),
        total_steps=row.total_steps,
        completed_steps=row.completed_steps,
        failed_steps=row.failed_steps,
        error=row.error,
        options=_load(row.options_json, {}),
        steps=[StepResult.from_dict(item) for item in _load(row.steps_json, [])],
    )


class SqlRunHistory(_AppBound, RunHistory):
    """Persist run records as insert-only rows of ``rpa_runs``."""

    def append(self, record: RunRecord) -> None:
        with self._session() as session:
            row = WorkflowRun(
                run_id=record.run_id,
                workflow_id=record.workflow_id,
                workflow_name=record.workflow_name,
                status=record.status.value,
                start_time=record.start_time,
                end_time=record.end_time,
                total_steps=record.total_steps,
                completed_steps=record.completed_steps,
                failed_steps=record.failed_steps,
                error=record.error,
                options_json=json.dumps(record.options),
                steps_json=json.dumps([result.to_dict() for result in record.steps]),
            )
            session.add(row)
            session.commit()

    def query(
        self, workflow_id: str | None = None, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[RunRecord]:
        if limit <= 0:
            return []
        with self._session() as session:
            statement = db.select(WorkflowRun)
            if workflow_id:
                statement = statement.where(WorkflowRun.workflow_id == workflow_id)
            statement = statement.order_by(WorkflowRun.seq.desc()).limit(limit)
            return [_record_from_row(row) for row in session.execute(statement).scalars()]
