"""Database operations step executor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .registry import ConfigField, Simulation

TYPE_ID = "database"
LABEL = "database"

_TABLE = ConfigField("table", str, default="unknown")


async def query(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "query",
        "recordsReturned": sim.count(10, 1009),
    }


async def insert(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "insert",
        "table": config["table"],
        "recordsInserted": sim.count(1, 100),
    }


async def update(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "update",
        "table": config["table"],
        "recordsUpdated": sim.count(1, 100),
    }


ACTIONS = (
    ("query", query, (ConfigField("query", str),)),
    ("insert", insert, (_TABLE,)),
    ("update", update, (_TABLE,)),
)
