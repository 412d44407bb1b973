"""Background queue for fire-and-forget persistence.

Mutators submit a save job under a key (e.g. ``"cart"``) and return
immediately.  One worker thread runs the jobs:

- a job that has not started yet is replaced by a newer job for the
  same key, so a burst of edits becomes a single write of the latest state
- at most one job per key is in flight at any time
- a failing job is logged and dropped; it never reaches the mutator

Anything still queued when the process dies is lost.  Call ``flush()``
where a write must land (tests, CLI exit).
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)

SaveJob = Callable[[], None]


class SaveQueue:

    def __init__(self, name: str = "fairbag-save-queue") -> None:
        self._name = name
        self._pending: OrderedDict[str, SaveJob] = OrderedDict()
        self._in_flight: set[str] = set()
        self._cond = threading.Condition()
        self._worker: threading.Thread | None = None
        self._closed = False

    def submit(self, key: str, job: SaveJob) -> None:
        """Queue ``job`` for ``key``, replacing any not-yet-started job for it."""
        with self._cond:
            if self._closed:
                raise RuntimeError("SaveQueue is closed")
            if key in self._pending:
                logger.debug("save_job_coalesced", key=key)
            self._pending[key] = job
            self._pending.move_to_end(key)
            self._ensure_worker()
            self._cond.notify_all()

    def flush(self, timeout: float | None = None) -> bool:
        """Block until nothing is queued or running.  False on timeout."""
        with self._cond:
            return self._cond.wait_for(
                lambda: not self._pending and not self._in_flight, timeout=timeout
            )

    def close(self, timeout: float | None = None) -> None:
        """Drain outstanding jobs and stop the worker."""
        self.flush(timeout)
        with self._cond:
            self._closed = True
            self._cond.notify_all()
        if self._worker is not None:
            self._worker.join(timeout)

    @property
    def pending_keys(self) -> list[str]:
        with self._cond:
            return list(self._pending)

    # --- Worker ---------------------------------------------------------------

    def _ensure_worker(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._worker.start()

    def _next_job(self) -> tuple[str, SaveJob] | None:
        """Pop the oldest job whose key is not already running."""
        for key in self._pending:
            if key not in self._in_flight:
                job = self._pending.pop(key)
                self._in_flight.add(key)
                return key, job
        return None

    def _run(self) -> None:
        while True:
            with self._cond:
                claimed = self._next_job()
                while claimed is None:
                    if self._closed:
                        return
                    self._cond.wait()
                    claimed = self._next_job()
            key, job = claimed
            try:
                job()
            except Exception:
                logger.exception("save_job_failed", key=key)
            finally:
                with self._cond:
                    self._in_flight.discard(key)
                    self._cond.notify_all()
