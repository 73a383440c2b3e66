"""Registry mapping ``(type, action)`` pairs to asynchronous step handlers."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..errors import UnknownActionError, UnknownStepTypeError, ValidationError
from ..rpa.domain import Step

Handler = Callable[[Mapping[str, Any], "Simulation"], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ConfigField:
    """A typed entry of an action's config payload."""

    name: str
    kind: type | tuple[type, ...]
    default: Any = None
    required: bool = False
    item_kind: type | None = None

    def check(self, value: Any) -> str | None:
        # bool is an int subclass; never accept it where a number is expected.
        if isinstance(value, bool) and bool not in _as_tuple(self.kind):
            return f"{self.name} must be {_kind_label(self.kind)}"
        if not isinstance(value, self.kind):
            return f"{self.name} must be {_kind_label(self.kind)}"
        if self.item_kind is not None and isinstance(value, list):
            if not all(isinstance(item, self.item_kind) for item in value):
                return f"{self.name} entries must each be {_kind_label(self.item_kind)}"
        return None


def _as_tuple(kind: type | tuple[type, ...]) -> tuple[type, ...]:
    return kind if isinstance(kind, tuple) else (kind,)


def _kind_label(kind: type | tuple[type, ...]) -> str:
    names = {str: "a string", int: "an integer", float: "a number", bool: "a boolean",
             list: "a list", dict: "an object"}
    return " or ".join(names.get(item, item.__name__) for item in _as_tuple(kind))


@dataclass(frozen=True)
class ActionHandler:
    """Handler and config declaration for one action of one step type."""

    type_id: str
    action: str
    handler: Handler
    config_fields: tuple[ConfigField, ...] = ()

    def parse_config(self, config: Mapping[str, Any]) -> dict[str, Any]:
        """Return the config with defaults applied, raising on invalid fields."""

        errors: list[str] = []
        parsed = dict(config)
        for config_field in self.config_fields:
            if config_field.name not in config or config[config_field.name] is None:
                if config_field.required:
                    errors.append(f"{config_field.name} is required")
                parsed[config_field.name] = config_field.default
                continue
            problem = config_field.check(config[config_field.name])
            if problem:
                errors.append(problem)
        if errors:
            raise ValidationError(errors)
        return parsed


class Simulation:
    """Source of synthetic results and simulated latency for built-in handlers."""

    def __init__(
        self,
        seed: int | None = None,
        latency: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        self._rng = random.Random(seed)
        self._latency = latency

    def count(self, low: int, high: int) -> int:
        """Return a random integer in ``[low, high]``."""

        return self._rng.randint(low, high)

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def chance(self, probability: float) -> bool:
        return self._rng.random() < probability

    async def pause(self, bounds: tuple[float, float] | None = None) -> None:
        low, high = bounds or self._latency
        delay = self._rng.uniform(low, high) if high > 0 else 0.0
        await asyncio.sleep(max(delay, 0.0))


class ExecutorRegistry:
    """Dispatch steps to the handler registered for their type and action."""

    def __init__(self, simulation: Simulation | None = None) -> None:
        self._simulation = simulation or Simulation()
        self._handlers: dict[str, dict[str, ActionHandler]] = {}
        self._labels: dict[str, str] = {}

    @property
    def simulation(self) -> Simulation:
        return self._simulation

    def register(
        self,
        type_id: str,
        action: str,
        handler: Handler,
        config_fields: Iterable[ConfigField] = (),
        *,
        label: str | None = None,
    ) -> None:
        """Register ``handler`` for ``(type_id, action)``, replacing any previous one."""

        self._handlers.setdefault(type_id, {})[action] = ActionHandler(
            type_id=type_id,
            action=action,
            handler=handler,
            config_fields=tuple(config_fields),
        )
        if label is not None or type_id not in self._labels:
            self._labels[type_id] = label or type_id

    def step_types(self) -> list[str]:
        return list(self._handlers)

    def actions_for(self, type_id: str) -> list[str]:
        return list(self._handlers.get(type_id, {}))

    def lookup(self, step_type: str, action: str) -> ActionHandler:
        actions = self._handlers.get(step_type)
        if actions is None:
            raise UnknownStepTypeError(f"Unknown step type: {step_type}")
        entry = actions.get(action)
        if entry is None:
            raise UnknownActionError(f"Unknown {self._labels[step_type]} action: {action}")
        return entry

    def validate_step(self, step: Step, position: int = 1) -> list[str]:
        """Return config errors for a step whose type and action are registered.

        Steps naming an unregistered type or action are left alone here; they
        fail when dispatched.
        """

        try:
            entry = self.lookup(step.type, step.action)
        except (UnknownStepTypeError, UnknownActionError):
            return []
        try:
            entry.parse_config(step.config)
        except ValidationError as exc:
            return [f"steps[{position}].config.{message}" for message in exc.errors]
        return []

    async def dispatch(self, step: Step) -> dict[str, Any]:
        entry = self.lookup(step.type, step.action)
        config = entry.parse_config(step.config)
        return await entry.handler(config, self._simulation)
