"""Background event loop the synchronous Flask handlers submit runs to."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

from flask import Flask

T = TypeVar("T")


class ExecutionRunner:
    """Own one asyncio loop on a daemon thread.

    Every workflow run of the application is scheduled on this loop, so runs
    started by concurrent requests interleave cooperatively while each run's
    steps stay sequential.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop, name="rpa-execution-runner", daemon=True
        )
        self._timeout = timeout
        self._thread.start()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Schedule ``coro`` on the runner loop and block until it finishes.

        Raises ``TimeoutError`` once the configured timeout elapses; the
        coroutine keeps running on the loop.
        """

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout=self._timeout)

    def close(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        if not self._loop.is_running():
            self._loop.close()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()


_runner_lock = threading.Lock()


def get_runner(app: Flask) -> ExecutionRunner:
    """Return the runner tied to the Flask app, starting it on first use."""

    with _runner_lock:
        if "otobook_runner" not in app.extensions:
            app.extensions["otobook_runner"] = ExecutionRunner(
                timeout=app.config.get("RPA_EXECUTION_TIMEOUT")
            )
    return app.extensions["otobook_runner"]
