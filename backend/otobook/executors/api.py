"""API integration step executor.

Platform calls are simulated: ``get`` reports a fetched record count for the
source platform and ``post`` reports per-target creation results.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..rpa.domain import format_timestamp, utcnow
from .registry import ConfigField, Simulation

TYPE_ID = "api"
LABEL = "API"


async def get(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    return {
        "status": "success",
        "action": "get",
        "source": config["source"],
        "resource": config["resource"],
        "recordsFetched": sim.count(10, 109),
        "timestamp": format_timestamp(utcnow()),
    }


async def post(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    # Older templates name the targets "platforms".
    targets = list(config["targets"] or config["platforms"] or [])
    results: dict[str, Any] = {}
    for platform in targets:
        await sim.pause()
        results[platform] = {
            "status": "success",
            "recordsCreated": sim.count(5, 54),
            "timestamp": format_timestamp(utcnow()),
        }
    return {
        "status": "success",
        "action": "post",
        "targetPlatforms": targets,
        "results": results,
    }


ACTIONS = (
    (
        "get",
        get,
        (
            ConfigField("source", str, default="unknown"),
            ConfigField("resource", str, default="data"),
        ),
    ),
    (
        "post",
        post,
        (
            ConfigField("targets", list, default=None, item_kind=str),
            ConfigField("platforms", list, default=None, item_kind=str),
        ),
    ),
)
