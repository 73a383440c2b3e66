"""Email automation step executor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..rpa.domain import format_timestamp, utcnow
from .registry import ConfigField, Simulation

TYPE_ID = "email"
LABEL = "email"


async def send(config: Mapping[str, Any], sim: Simulation) -> dict[str, Any]:
    await sim.pause()
    recipients = config["recipients"]
    sent = len(recipients) if recipients else sim.count(1, 100)
    return {
        "status": "success",
        "action": "send",
        "template": config["template"],
        "emailsSent": sent,
        "timestamp": format_timestamp(utcnow()),
    }


ACTIONS = (
    (
        "send",
        send,
        (
            ConfigField("template", str, default="default"),
            ConfigField("recipients", list, item_kind=str),
        ),
    ),
)
