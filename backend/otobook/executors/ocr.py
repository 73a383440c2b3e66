"""OCR step executor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .registry import ConfigField, Simulation

TYPE_ID = "ocr"
LABEL = "OCR"

_PROVIDER = ConfigField("provider", str, default="tesseract")


async def extract_text(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "extract_text",
        "provider": config["provider"],
        "recordsProcessed": sim.count(10, 109),
        "avgConfidence": 87.5,
    }


async def extract_form(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "extract_form",
        "provider": config["provider"],
        "fieldsExtracted": sim.count(5, 19),
        "data": {"sample": "form data"},
    }


async def extract_table(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "extract_table",
        "provider": config["provider"],
        "tablesFound": sim.count(1, 5),
        "rowsProcessed": sim.count(50, 549),
    }


ACTIONS = (
    ("extract_text", extract_text, (_PROVIDER,)),
    ("extract_form", extract_form, (_PROVIDER,)),
    ("extract_table", extract_table, (_PROVIDER,)),
)
