"""Database models for the Otobook RPA backend."""

from .runs import WorkflowRun
from .workflow import Workflow

__all__ = ["Workflow", "WorkflowRun"]
