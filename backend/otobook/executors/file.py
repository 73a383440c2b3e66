"""File operations step executor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .registry import ConfigField, Simulation

TYPE_ID = "file"
LABEL = "file"


async def read(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "read",
        "source": config["source"],
        "filesRead": sim.count(1, 50),
    }


async def write(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "write",
        "destination": config["destination"],
        "filesWritten": sim.count(1, 50),
        "totalSize": f"{sim.count(1000, 10999)} KB",
    }


ACTIONS = (
    ("read", read, (ConfigField("source", str, default="unknown"),)),
    ("write", write, (ConfigField("destination", str, default="unknown"),)),
)
