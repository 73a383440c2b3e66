"""Append-only log of workflow run records."""

from __future__ import annotations

import copy
import threading

from .domain import RunRecord

DEFAULT_HISTORY_LIMIT = 50


class RunHistory:
    """Interface shared by the run history stores."""

    def append(self, record: RunRecord) -> None:
        raise NotImplementedError

    def query(
        self, workflow_id: str | None = None, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[RunRecord]:
        """Return the newest ``limit`` records, most recent first."""

        raise NotImplementedError


class InMemoryRunHistory(RunHistory):
    """Keep run records in insertion order in process memory."""

    def __init__(self) -> None:
        self._records: list[RunRecord] = []
        self._lock = threading.Lock()

    def append(self, record: RunRecord) -> None:
        with self._lock:
            self._records.append(copy.deepcopy(record))

    def query(
        self, workflow_id: str | None = None, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[RunRecord]:
        if limit <= 0:
            return []
        with self._lock:
            records = self._records
            if workflow_id:
                records = [record for record in records if record.workflow_id == workflow_id]
            tail = records[-limit:]
            return [copy.deepcopy(record) for record in reversed(tail)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
