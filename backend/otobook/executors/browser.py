"""Browser automation step executor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .registry import ConfigField, Simulation

TYPE_ID = "browser"
LABEL = "browser"


async def navigate(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "navigate",
        "url": config["url"],
        "loadTime": sim.count(500, 3499),
    }


async def extract_data(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "extract_data",
        "selector": config["selector"],
        "itemsFound": sim.count(5, 54),
        "dataExtracted": True,
    }


ACTIONS = (
    ("navigate", navigate, (ConfigField("url", str, default="unknown"),)),
    ("extract_data", extract_data, (ConfigField("selector", str, default="unknown"),)),
)
