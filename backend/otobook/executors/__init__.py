"""Built-in step executors and the registry that dispatches to them."""

from __future__ import annotations

from collections.abc import Iterable
from types import ModuleType

from . import api, browser, data, database, email, file, ocr
from .registry import ActionHandler, ConfigField, ExecutorRegistry, Simulation

_BUILTIN_MODULES: list[ModuleType] = [ocr, api, data, browser, file, database, email]


def iter_builtin_modules() -> Iterable[ModuleType]:
    """Yield the modules providing the built-in step types."""

    yield from _BUILTIN_MODULES


def build_default_registry(simulation: Simulation | None = None) -> ExecutorRegistry:
    """Return a registry with every built-in action registered."""

    registry = ExecutorRegistry(simulation)
    for module in iter_builtin_modules():
        for action, handler, config_fields in module.ACTIONS:
            registry.register(
                module.TYPE_ID,
                action,
                handler,
                config_fields,
                label=module.LABEL,
            )
    return registry


__all__ = [
    "ActionHandler",
    "ConfigField",
    "ExecutorRegistry",
    "Simulation",
    "build_default_registry",
    "iter_builtin_modules",
]
