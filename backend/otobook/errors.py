"""Exception hierarchy for the RPA workflow engine."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "RpaError",
    "NotFoundError",
    "ValidationError",
    "UnknownStepTypeError",
    "UnknownActionError",
    "ExecutionAbortedError",
]


class RpaError(Exception):
    """Base error for all RPA components."""


class NotFoundError(RpaError):
    """Raised when a workflow, template or platform id does not resolve."""


class ValidationError(RpaError):
    """Raised when workflow input is missing required fields or is malformed."""

    def __init__(self, errors: str | Iterable[str]) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors: list[str] = list(errors)
        super().__init__("; ".join(self.errors))


class UnknownStepTypeError(RpaError):
    """Raised when a step references a type no executor is registered for."""


class UnknownActionError(RpaError):
    """Raised when an executor does not recognise the requested action."""


class ExecutionAbortedError(RpaError):
    """Raised inside a run when stop-on-error ends it after a failed step."""
