"""Facade exposing every RPA operation over injected stores."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from flask import Flask

from ..errors import ValidationError
from ..executors import ExecutorRegistry, Simulation, build_default_registry
from .catalog import ActionType, CatalogStore, Platform, WorkflowTemplate
from .domain import RunRecord, Workflow, format_timestamp, utcnow
from .engine import ExecutionEngine
from .history import DEFAULT_HISTORY_LIMIT, InMemoryRunHistory, RunHistory
from .registry import InMemoryWorkflowRegistry, WorkflowRegistry

logger = logging.getLogger(__name__)

DEFAULT_DEMO_TEMPLATE = "invoice_processing"


class RpaService:
    """Operation surface of the RPA engine.

    The HTTP layer calls into this object only; the stores, executors and
    engine are passed in so tests can build isolated instances.
    """

    def __init__(
        self,
        registry: WorkflowRegistry,
        history: RunHistory,
        executors: ExecutorRegistry,
        catalog: CatalogStore | None = None,
        connection_delay: tuple[float, float] = (1.0, 1.5),
        connection_success_rate: float = 0.9,
    ) -> None:
        self.catalog = catalog or CatalogStore()
        self.registry = registry
        self.history = history
        self.executors = executors
        self.engine = ExecutionEngine(registry, history, executors)
        self._connection_delay = connection_delay
        self._connection_success_rate = connection_success_rate

    # Catalog -----------------------------------------------------------

    def list_action_types(self) -> list[ActionType]:
        return self.catalog.list_action_types()

    def list_platforms(self) -> list[Platform]:
        return self.catalog.list_platforms()

    def get_platform(self, platform_id: str) -> Platform:
        return self.catalog.get_platform(platform_id)

    def list_templates(self) -> list[WorkflowTemplate]:
        return self.catalog.list_templates()

    def get_template(self, template_id: str) -> WorkflowTemplate:
        return self.catalog.get_template(template_id)

    def get_schedule_config(self) -> dict[str, Any]:
        return self.catalog.get_schedule_config()

    # Workflows ---------------------------------------------------------

    def create_workflow(self, payload: Mapping[str, Any]) -> Workflow:
        return self.registry.create(payload)

    def create_workflow_from_template(
        self, template_id: str, overrides: Mapping[str, Any] | None = None
    ) -> Workflow:
        """Create a workflow whose steps are copied from a template."""

        template = self.catalog.get_template(template_id)
        payload: dict[str, Any] = {
            "name": template.name,
            "description": template.description,
            "steps": [step.to_dict() for step in template.copy_steps()],
        }
        for key, value in (overrides or {}).items():
            if key in {"name", "description", "schedule", "platformConnections"}:
                payload[key] = value
        return self.registry.create(payload)

    def list_workflows(self) -> list[Workflow]:
        return self.registry.list()

    def get_workflow(self, workflow_id: str) -> Workflow:
        return self.registry.get(workflow_id)

    def update_workflow(self, workflow_id: str, partial: Mapping[str, Any]) -> Workflow:
        return self.registry.update(workflow_id, partial)

    def delete_workflow(self, workflow_id: str) -> dict[str, Any]:
        self.registry.delete(workflow_id)
        return {"success": True, "message": "Workflow deleted"}

    # Execution ---------------------------------------------------------

    async def execute_workflow(
        self, workflow_id: str, options: Mapping[str, Any] | None = None
    ) -> RunRecord:
        return await self.engine.execute(workflow_id, options)

    async def demo_execute(self, template_id: str | None = None) -> dict[str, Any]:
        """Run a throwaway copy of a template and return its run record."""

        template = self.catalog.get_template(template_id or DEFAULT_DEMO_TEMPLATE)
        workflow = self.create_workflow_from_template(
            template.id, {"name": f"Demo: {template.name}"}
        )
        try:
            record = await self.engine.execute(workflow.id)
        finally:
            self.registry.delete(workflow.id)

        payload = record.to_dict()
        payload["isDemo"] = True
        payload["note"] = "This is a demo execution with simulated results."
        return payload

    async def test_connection(
        self, platform_id: str, credentials: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Simulate a connectivity check against a catalog platform."""

        if not platform_id:
            raise ValidationError("Platform ID is required")
        platform = self.catalog.get_platform(platform_id)
        simulation = self.executors.simulation

        await simulation.pause(self._connection_delay)
        success = simulation.chance(self._connection_success_rate)
        logger.info(
            "Connection test for %s %s", platform.id, "succeeded" if success else "failed"
        )
        return {
            "platform": platform.id,
            "platformName": platform.name,
            "success": success,
            "message": (
                "Connection successful" if success else "Connection failed: Invalid credentials"
            ),
            "latency": simulation.count(100, 299),
            "timestamp": format_timestamp(utcnow()),
        }

    # History -----------------------------------------------------------

    def get_run_history(
        self, workflow_id: str | None = None, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[RunRecord]:
        return self.history.query(workflow_id, limit)


def build_service(app: Flask) -> RpaService:
    """Assemble the service from the application configuration."""

    config = app.config
    simulation = Simulation(
        seed=config.get("RPA_RANDOM_SEED"),
        latency=(
            float(config.get("RPA_STEP_LATENCY_MIN", 0.0)),
            float(config.get("RPA_STEP_LATENCY_MAX", 0.0)),
        ),
    )
    executors = build_default_registry(simulation)

    store = (config.get("RPA_STORE") or "memory").strip().lower()
    if store == "sql":
        from .sql_store import SqlRunHistory, SqlWorkflowRegistry

        registry: WorkflowRegistry = SqlWorkflowRegistry(app, executors.validate_step)
        history: RunHistory = SqlRunHistory(app)
    elif store == "memory":
        registry = InMemoryWorkflowRegistry(executors.validate_step)
        history = InMemoryRunHistory()
    else:
        raise ValueError(f"unsupported RPA_STORE {store!r}")

    app.logger.info("RPA service using %s store", store)
    return RpaService(
        registry,
        history,
        executors,
        connection_delay=(
            float(config.get("RPA_CONNECTION_DELAY_MIN", 1.0)),
            float(config.get("RPA_CONNECTION_DELAY_MAX", 1.5)),
        ),
        connection_success_rate=float(config.get("RPA_CONNECTION_SUCCESS_RATE", 0.9)),
    )


def get_service(app: Flask) -> RpaService:
    """Return the service bound to the Flask app, creating it on first use."""

    if "otobook_rpa" not in app.extensions:
        app.extensions["otobook_rpa"] = build_service(app)
    return app.extensions["otobook_rpa"]
