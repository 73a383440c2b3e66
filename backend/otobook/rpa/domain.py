"""Domain objects shared by the registry, run history and execution engine."""

from __future__ import annotations

import copy
import itertools
import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..errors import ValidationError


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"


class StepStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


_id_sequence = itertools.count(1)


def new_id(prefix: str) -> str:
    """Return a process-unique identifier such as ``wf_1718000000000_7_a1b2c3d4``.

    The sequence number makes ids unique within the process; the timestamp and
    random suffix keep them distinct from ids issued by earlier processes that
    share the same SQL store.
    """

    millis = int(time.time() * 1000)
    return f"{prefix}_{millis}_{next(_id_sequence)}_{secrets.token_hex(4)}"


def utcnow() -> datetime:
    return datetime.now(UTC)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def ensure_aware(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""

    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass
class Step:
    """One unit of work: an action of a given action type plus its config."""

    type: str
    action: str
    config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Any, position: int = 1) -> Step:
        if not isinstance(payload, Mapping):
            raise ValidationError(f"steps[{position}] must be an object")

        errors: list[str] = []
        step_type = payload.get("type")
        action = payload.get("action")
        config = payload.get("config")

        if not isinstance(step_type, str) or not step_type.strip():
            errors.append(f"steps[{position}].type is required")
        if not isinstance(action, str) or not action.strip():
            errors.append(f"steps[{position}].action is required")
        if config is None:
            config = {}
        elif not isinstance(config, Mapping):
            errors.append(f"steps[{position}].config must be an object")

        if errors:
            raise ValidationError(errors)

        return cls(
            type=step_type.strip(),
            action=action.strip(),
            config=copy.deepcopy(dict(config)),
        )

    def copy(self) -> Step:
        return Step(type=self.type, action=self.action, config=copy.deepcopy(self.config))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "action": self.action, "config": copy.deepcopy(self.config)}


def parse_steps(value: Any) -> list[Step]:
    """Parse a list of step payloads, collecting errors for every bad entry."""

    if not isinstance(value, list):
        raise ValidationError("steps must be a list")

    steps: list[Step] = []
    errors: list[str] = []
    for position, item in enumerate(value, start=1):
        try:
            steps.append(Step.from_dict(item, position))
        except ValidationError as exc:
            errors.extend(exc.errors)
    if errors:
        raise ValidationError(errors)
    return steps


@dataclass
class Workflow:
    """A named, ordered sequence of steps defined for repeated execution."""

    id: str
    name: str
    steps: list[Step]
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    schedule: Any = None
    platform_connections: Any = None
    status: str = "active"
    run_count: int = 0
    last_run: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "steps": [step.to_dict() for step in self.steps],
            "schedule": copy.deepcopy(self.schedule),
            "platformConnections": copy.deepcopy(self.platform_connections),
            "status": self.status,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
            "runCount": self.run_count,
            "lastRun": format_timestamp(self.last_run),
        }


@dataclass
class StepResult:
    """Outcome of one executed step."""

    step_number: int
    type: str
    action: str
    status: StepStatus
    duration: int
    timestamp: datetime
    output: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "stepNumber": self.step_number,
            "type": self.type,
            "action": self.action,
            "status": self.status.value,
            "duration": self.duration,
            "output": self.output,
            "error": self.error,
            "timestamp": format_timestamp(self.timestamp),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> StepResult:
        return cls(
            step_number=int(payload["stepNumber"]),
            type=payload["type"],
            action=payload["action"],
            status=StepStatus(payload["status"]),
            duration=int(payload.get("duration") or 0),
            timestamp=datetime.fromisoformat(payload["timestamp"].replace("Z", "+00:00")),
            output=payload.get("output"),
            error=payload.get("error"),
        )


@dataclass
class RunRecord:
    """The outcome of one execution attempt of a workflow."""

    run_id: str
    workflow_id: str
    workflow_name: str
    start_time: datetime
    total_steps: int
    status: RunStatus = RunStatus.RUNNING
    end_time: datetime | None = None
    steps: list[StepResult] = field(default_factory=list)
    completed_steps: int = 0
    failed_steps: int = 0
    error: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "runId": self.run_id,
            "workflowId": self.workflow_id,
            "workflowName": self.workflow_name,
            "status": self.status.value,
            "startTime": format_timestamp(self.start_time),
            "endTime": format_timestamp(self.end_time),
            "steps": [result.to_dict() for result in self.steps],
            "options": copy.deepcopy(self.options),
            "totalSteps": self.total_steps,
            "completedSteps": self.completed_steps,
            "failedSteps": self.failed_steps,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class ExecutionOptions:
    stop_on_error: bool = False

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> ExecutionOptions:
        if not payload:
            return cls()
        flag = payload.get("stopOnError", payload.get("stop_on_error", False))
        if isinstance(flag, str):
            flag = flag.strip().lower() in {"1", "true", "yes", "on"}
        return cls(stop_on_error=bool(flag))
