"""Workflow registry: CRUD over user-defined workflows."""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from ..errors import NotFoundError, ValidationError
from .domain import Step, Workflow, new_id, parse_steps, utcnow

StepValidator = Callable[[Step, int], list[str]]

# Fields a caller may change through update(); everything else is engine-owned.
UPDATABLE_FIELDS = {
    "name": "name",
    "description": "description",
    "steps": "steps",
    "schedule": "schedule",
    "platformConnections": "platform_connections",
    "status": "status",
}


def _normalize_name(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def parse_workflow_input(
    payload: Mapping[str, Any],
    step_validator: StepValidator | None = None,
) -> dict[str, Any]:
    """Validate a create payload and return normalised workflow fields."""

    errors: list[str] = []
    name = _normalize_name(payload.get("name"))
    if not name:
        errors.append("name is required")

    description = payload.get("description")
    if description is not None and not isinstance(description, str):
        errors.append("description must be a string")

    steps: list[Step] = []
    raw_steps = payload.get("steps")
    if raw_steps is None or raw_steps == []:
        errors.append("steps must contain at least one step")
    else:
        try:
            steps = parse_steps(raw_steps)
        except ValidationError as exc:
            errors.extend(exc.errors)

    if step_validator is not None:
        for position, step in enumerate(steps, start=1):
            errors.extend(step_validator(step, position))

    if errors:
        raise ValidationError(errors)

    return {
        "name": name,
        "description": description,
        "steps": steps,
        "schedule": copy.deepcopy(payload.get("schedule")),
        "platform_connections": copy.deepcopy(payload.get("platformConnections")),
    }


def parse_workflow_update(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Return the attribute changes for a partial update.

    Merged content is not validated beyond what is needed to store it: an empty
    ``steps`` list is accepted here even though create() rejects it, but
    ``name`` and ``status`` must stay non-empty strings and ``description`` a
    string or null.
    """

    changes: dict[str, Any] = {}
    errors: list[str] = []
    for key, attribute in UPDATABLE_FIELDS.items():
        if key not in partial:
            continue
        value = partial[key]
        if key == "steps":
            try:
                value = parse_steps(value if value is not None else [])
            except ValidationError as exc:
                errors.extend(exc.errors)
                continue
        elif key in {"name", "status"}:
            value = _normalize_name(value)
            if not value:
                errors.append(f"{key} must be a non-empty string")
                continue
        elif key == "description":
            if value is not None and not isinstance(value, str):
                errors.append("description must be a string")
                continue
        else:
            value = copy.deepcopy(value)
        changes[attribute] = value
    if errors:
        raise ValidationError(errors)
    return changes


class WorkflowRegistry:
    """Shared create/update semantics; subclasses provide the storage."""

    def __init__(self, step_validator: StepValidator | None = None) -> None:
        self._step_validator = step_validator

    def create(self, payload: Mapping[str, Any]) -> Workflow:
        data = parse_workflow_input(payload, self._step_validator)
        now = utcnow()
        workflow = Workflow(
            id=new_id("wf"),
            name=data["name"],
            description=data["description"],
            steps=data["steps"],
            schedule=data["schedule"],
            platform_connections=data["platform_connections"],
            status="active",
            created_at=now,
            updated_at=now,
            run_count=0,
            last_run=None,
        )
        self._insert(workflow)
        return copy.deepcopy(workflow)

    def update(self, workflow_id: str, partial: Mapping[str, Any]) -> Workflow:
        """Merge ``partial`` into the stored workflow.

        Besides NotFoundError, raises ValidationError for unstorable field values
        and for replacement steps whose config fails their action's checks.
        """

        self.get(workflow_id)
        changes = parse_workflow_update(partial)
        if self._step_validator is not None and "steps" in changes:
            errors: list[str] = []
            for position, step in enumerate(changes["steps"], start=1):
                errors.extend(self._step_validator(step, position))
            if errors:
                raise ValidationError(errors)
        return self._apply_update(workflow_id, changes, utcnow())

    def get(self, workflow_id: str) -> Workflow:
        raise NotImplementedError

    def list(self) -> list[Workflow]:
        raise NotImplementedError

    def delete(self, workflow_id: str) -> None:
        raise NotImplementedError

    def record_run_completion(self, workflow_id: str, when: datetime) -> None:
        """Increment the run counter and stamp ``lastRun``; engine use only."""

        raise NotImplementedError

    def _insert(self, workflow: Workflow) -> None:
        raise NotImplementedError

    def _apply_update(
        self, workflow_id: str, changes: dict[str, Any], when: datetime
    ) -> Workflow:
        raise NotImplementedError


class InMemoryWorkflowRegistry(WorkflowRegistry):
    """Keep workflows in process memory.

    Request threads and the execution runner thread both touch the registry,
    so every access holds the lock. Callers receive copies.
    """

    def __init__(self, step_validator: StepValidator | None = None) -> None:
        super().__init__(step_validator)
        self._workflows: dict[str, Workflow] = {}
        self._lock = threading.RLock()

    def get(self, workflow_id: str) -> Workflow:
        with self._lock:
            workflow = self._workflows.get(workflow_id)
            if workflow is None:
                raise NotFoundError(f"Workflow {workflow_id} not found")
            return copy.deepcopy(workflow)

    def list(self) -> list[Workflow]:
        with self._lock:
            return [copy.deepcopy(workflow) for workflow in self._workflows.values()]

    def delete(self, workflow_id: str) -> None:
        with self._lock:
            if workflow_id not in self._workflows:
                raise NotFoundError(f"Workflow {workflow_id} not found")
            del self._workflows[workflow_id]

    def record_run_completion(self, workflow_id: str, when: datetime) -> None:
        with self._lock:
            workflow = self._workflows.get(workflow_id)
            if workflow is None:
                raise NotFoundError(f"Workflow {workflow_id} not found")
            workflow.run_count += 1
            workflow.last_run = when

    def _insert(self, workflow: Workflow) -> None:
        with self._lock:
            if workflow.id in self._workflows:
                raise ValidationError(f"workflow id {workflow.id} already issued")
            self._workflows[workflow.id] = copy.deepcopy(workflow)

    def _apply_update(
        self, workflow_id: str, changes: dict[str, Any], when: datetime
    ) -> Workflow:
        with self._lock:
            workflow = self._workflows.get(workflow_id)
            if workflow is None:
                raise NotFoundError(f"Workflow {workflow_id} not found")
            for attribute, value in changes.items():
                setattr(workflow, attribute, value)
            workflow.updated_at = when
            return copy.deepcopy(workflow)
