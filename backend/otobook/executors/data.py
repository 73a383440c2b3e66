"""Data processing step executor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .registry import ConfigField, Simulation

TYPE_ID = "data"
LABEL = "data"


async def transform(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    result = {
        "status": "success",
        "action": "transform",
        "mapping": config["mapping"],
        "recordsTransformed": sim.count(10, 109),
    }
    if config["format"] is not None:
        result["format"] = config["format"]
    return result


async def validate(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "validate",
        "schema": config["schema"],
        "validRecords": sim.count(10, 99),
        "invalidRecords": sim.count(0, 9),
    }


async def classify(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "classify",
        "model": config["model"],
        "categories": sim.count(2, 11),
        "avgConfidence": 85 + sim.uniform(0, 10),
    }


def _record_filter(action: str):
    async def handler(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
        await sim.pause()
        return {
            "status": "success",
            "action": action,
            "recordsProcessed": sim.count(10, 109),
            "resultRecords": sim.count(5, 84),
        }

    handler.__name__ = action
    return handler


merge = _record_filter("merge")
filter_records = _record_filter("filter")


ACTIONS = (
    (
        "transform",
        transform,
        (
            ConfigField("mapping", str, default="default"),
            ConfigField("format", str),
        ),
    ),
    ("validate", validate, (ConfigField("schema", str, default="default"),)),
    ("classify", classify, (ConfigField("model", str, default="default"),)),
    ("merge", merge, ()),
    ("filter", filter_records, ()),
)
