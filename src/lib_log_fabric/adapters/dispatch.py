"""Thread-based dispatcher for remote delivery jobs.

Purpose
-------
Run the network leg of push handlers off the caller's thread while capping
how much work can be in flight at once.

Contents
--------
* :class:`DispatchStats` - counters snapshot.
* :class:`BackgroundDispatcher` - bounded queue feeding a small worker pool.

System Role
-----------
Each push handler family owns one dispatcher. ``submit`` never blocks: when
the queue is full the job is dropped and counted, so a slow or dead endpoint
can degrade delivery but never the caller. Job failures are swallowed; they
are reported only through counters, an optional diagnostic hook, and the
stdlib :mod:`logging` debug channel, never through the fabric itself.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from lib_log_fabric.application.ports.dispatch import DispatchPort
from lib_log_fabric.domain.errors import CloseError


LOGGER = logging.getLogger(__name__)

Job = Callable[[], None]
DiagnosticHook = Callable[[str, dict[str, Any]], None] | None


@dataclass(slots=True, frozen=True)
class DispatchStats:
    """Point-in-time counters of a dispatcher."""

    submitted: int
    delivered: int
    failed: int
    dropped: int


class BackgroundDispatcher(DispatchPort):
    """Execute jobs on daemon worker threads.

    Examples
    --------
    >>> done = []
    >>> dispatcher = BackgroundDispatcher(maxsize=4)
    >>> dispatcher.submit(lambda: done.append("pushed"))
    True
    >>> dispatcher.wait_until_idle(1.0)
    True
    >>> dispatcher.close()
    >>> done
    ['pushed']
    """

    def __init__(
        self,
        *,
        maxsize: int = 1024,
        workers: int = 1,
        stop_timeout: float | None = 5.0,
        name: str = "lib_log_fabric-dispatch",
        diagnostic: DiagnosticHook = None,
    ) -> None:
        """Create the dispatcher; worker threads start on the first submit.

        Parameters
        ----------
        maxsize:
            Queue capacity; ``0`` leaves the queue unbounded.
        workers:
            Number of worker threads, i.e. the cap on concurrent deliveries.
        stop_timeout:
            Default drain deadline (seconds) used by :meth:`close`.
        diagnostic:
            Optional callback receiving ``(event_name, payload)`` for drops and
            job failures.
        """
        if maxsize < 0:
            raise ValueError("maxsize must not be negative")
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._queue: queue.Queue[Job | None] = queue.Queue(maxsize=maxsize)
        self._workers = workers
        self._stop_timeout = stop_timeout
        self._name = name
        self._diagnostic = diagnostic
        self._threads: list[threading.Thread] = []
        self._state_lock = threading.Lock()
        self._idle = threading.Condition(self._state_lock)
        self._pending = 0
        self._closed = False
        self._submitted = 0
        self._delivered = 0
        self._failed = 0
        self._dropped = 0

    def submit(self, job: Job) -> bool:
        """Queue ``job`` without blocking.

        Returns ``True`` when the job was accepted, ``False`` when the
        dispatcher is closed or the queue is full.
        """
        with self._state_lock:
            if self._closed:
                self._dropped += 1
                accepted = False
            else:
                self._start_locked()
                try:
                    self._queue.put_nowait(job)
                except queue.Full:
                    self._dropped += 1
                    accepted = False
                else:
                    self._pending += 1
                    self._submitted += 1
                    accepted = True
        if not accepted:
            self._emit_diagnostic("dispatch_dropped", {"queue_size": self._queue.maxsize})
        return accepted

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until every accepted job finished or ``timeout`` elapses."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._idle:
            while self._pending:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._idle.wait(remaining)
            return True

    def close(self, timeout: float | None = None) -> None:
        """Stop accepting jobs, drain queued ones, and join the workers.

        Raises
        ------
        CloseError
            When the workers are still busy after the drain deadline.
        """
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            threads = list(self._threads)
        if not threads:
            return

        effective_timeout = timeout if timeout is not None else self._stop_timeout
        deadline = None if effective_timeout is None else time.monotonic() + effective_timeout
        for _ in threads:
            self._enqueue_stop_signal(deadline)
        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
        stuck = [thread.name for thread in threads if thread.is_alive()]
        if stuck:
            self._emit_diagnostic("dispatch_shutdown_timeout", {"timeout": effective_timeout, "threads": stuck})
            raise CloseError(f"dispatcher did not drain within {effective_timeout} seconds")

    @property
    def stats(self) -> DispatchStats:
        with self._state_lock:
            return DispatchStats(self._submitted, self._delivered, self._failed, self._dropped)

    @property
    def closed(self) -> bool:
        return self._closed

    def _start_locked(self) -> None:
        if self._threads or self._closed:
            return
        for index in range(self._workers):
            thread = threading.Thread(target=self._run, name=f"{self._name}-{index}", daemon=True)
            thread.start()
            self._threads.append(thread)

    def _run(self) -> None:
        """Worker loop draining the queue until a stop signal arrives."""
        while True:
            job = self._queue.get()
            try:
                if job is None:
                    break
                try:
                    job()
                except Exception as exc:  # noqa: BLE001
                    self._record(failed=True)
                    LOGGER.debug("Remote log delivery failed; dropping record", exc_info=exc)
                    self._emit_diagnostic("dispatch_failed", {"exception": repr(exc)})
                else:
                    self._record(failed=False)
            finally:
                self._queue.task_done()

    def _record(self, *, failed: bool) -> None:
        with self._idle:
            if failed:
                self._failed += 1
            else:
                self._delivered += 1
            self._pending -= 1
            if not self._pending:
                self._idle.notify_all()

    def _enqueue_stop_signal(self, deadline: float | None) -> None:
        """Wake one worker, dropping the oldest job when the queue is full."""
        while True:
            try:
                if deadline is None:
                    self._queue.put(None)
                else:
                    self._queue.put(None, timeout=max(0.0, deadline - time.monotonic()))
                return
            except queue.Full:
                try:
                    dropped = self._queue.get_nowait()
                except queue.Empty:
                    continue
                self._queue.task_done()
                if dropped is not None:
                    with self._idle:
                        self._dropped += 1
                        self._pending -= 1
                        if not self._pending:
                            self._idle.notify_all()

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        """Invoke the diagnostic hook while guarding against callback failures."""
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("Dispatch diagnostic hook raised while reporting %s", name, exc_info=exc)


__all__ = ["BackgroundDispatcher", "DispatchStats"]
