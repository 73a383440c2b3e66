"""Execution engine running a workflow's steps in sequence."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from ..errors import ExecutionAbortedError, NotFoundError
from ..executors import ExecutorRegistry
from .domain import (
    ExecutionOptions,
    RunRecord,
    RunStatus,
    Step,
    StepResult,
    StepStatus,
    new_id,
    utcnow,
)
from .history import RunHistory
from .registry import WorkflowRegistry

logger = logging.getLogger(__name__)


class ExecutionEngine:
    """Execute workflows with partial-failure tolerance and record every run.

    Steps run strictly one after another; each executor is awaited before the
    next step starts. Step failures are captured in the run record rather than
    raised. Only an unknown workflow id raises, before any record exists.
    """

    def __init__(
        self,
        registry: WorkflowRegistry,
        history: RunHistory,
        executors: ExecutorRegistry,
    ) -> None:
        self._registry = registry
        self._history = history
        self._executors = executors

    async def execute(
        self, workflow_id: str, options: Mapping[str, Any] | None = None
    ) -> RunRecord:
        workflow = self._registry.get(workflow_id)
        run_options = ExecutionOptions.from_mapping(options)
        # Steps are read once; later edits to the workflow do not affect this run.
        steps = [step.copy() for step in workflow.steps]

        record = RunRecord(
            run_id=new_id("run"),
            workflow_id=workflow.id,
            workflow_name=workflow.name,
            start_time=utcnow(),
            total_steps=len(steps),
            options=dict(options or {}),
        )
        logger.info("Executing workflow %s (%s)", workflow.name, record.run_id)

        try:
            for number, step in enumerate(steps, start=1):
                logger.info("  Step %s/%s: %s - %s", number, len(steps), step.type, step.action)
                result = await self._run_step(step, number)
                record.steps.append(result)

                if result.status is StepStatus.COMPLETED:
                    record.completed_steps += 1
                    continue

                record.failed_steps += 1
                if run_options.stop_on_error:
                    raise ExecutionAbortedError(f"Step {number} failed: {result.error}")

            record.status = (
                RunStatus.COMPLETED if record.failed_steps == 0 else RunStatus.COMPLETED_WITH_ERRORS
            )
            record.end_time = utcnow()
            logger.info(
                "Workflow completed: %s/%s steps", record.completed_steps, record.total_steps
            )
        except Exception as exc:
            record.status = RunStatus.FAILED
            record.end_time = utcnow()
            record.error = str(exc)
            if isinstance(exc, ExecutionAbortedError):
                logger.warning("Workflow failed: %s", exc)
            else:
                logger.exception("Workflow %s aborted by unexpected error", record.run_id)

        self._record_completion(record)
        self._history.append(record)
        return record

    async def _run_step(self, step: Step, number: int) -> StepResult:
        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            output = await self._executors.dispatch(step)
        except Exception as exc:
            return StepResult(
                step_number=number,
                type=step.type,
                action=step.action,
                status=StepStatus.FAILED,
                duration=_elapsed_ms(loop, started),
                timestamp=utcnow(),
                error=str(exc),
            )
        return StepResult(
            step_number=number,
            type=step.type,
            action=step.action,
            status=StepStatus.COMPLETED,
            duration=_elapsed_ms(loop, started),
            timestamp=utcnow(),
            output=output,
        )

    def _record_completion(self, record: RunRecord) -> None:
        try:
            self._registry.record_run_completion(record.workflow_id, record.end_time)
        except NotFoundError:
            # Deleted while the run was in flight; the run record is still kept.
            logger.warning(
                "Workflow %s vanished before run %s finished",
                record.workflow_id,
                record.run_id,
            )


def _elapsed_ms(loop: asyncio.AbstractEventLoop, started: float) -> int:
    return int(round((loop.time() - started) * 1000))
