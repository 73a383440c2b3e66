"""Seed the SQL workflow store with one workflow per built-in template."""
from __future__ import annotations

import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.otobook import Config, create_app
from backend.otobook.executors import build_default_registry
from backend.otobook.rpa.catalog import CatalogStore, WorkflowTemplate
from backend.otobook.rpa.sql_store import SqlWorkflowRegistry


class SeedConfig(Config):
    RPA_STORE = "sql"


def _ensure_template_workflow(
    registry: SqlWorkflowRegistry, template: WorkflowTemplate, existing: set[str]
) -> bool:
    """Create a workflow from ``template`` unless one with its name exists."""

    if template.name in existing:
        return False
    registry.create(
        {
            "name": template.name,
            "description": template.description,
            "steps": [step.to_dict() for step in template.copy_steps()],
        }
    )
    existing.add(template.name)
    return True


def main() -> None:
    app = create_app(SeedConfig)
    registry = SqlWorkflowRegistry(app, build_default_registry().validate_step)
    existing = {workflow.name for workflow in registry.list()}

    created = 0
    skipped = 0
    for template in CatalogStore().list_templates():
        if _ensure_template_workflow(registry, template, existing):
            created += 1
        else:
            skipped += 1

    print(
        "Seed completed",
        f"workflows created={created}",
        f"workflows skipped={skipped}",
    )


if __name__ == "__main__":
    main()
