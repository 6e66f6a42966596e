from __future__ import annotations

import logging
import os
import time
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Optional, Set, TypeVar

R = TypeVar("R")

log = logging.getLogger(__name__)


@dataclass
class ThreadStats:
    start_ts: float
    tasks_submitted: int = 0
    tasks_completed: int = 0
    tasks_failed: int = 0

    @property
    def uptime_sec(self) -> float:
        return time.time() - self.start_ts

    @property
    def in_flight(self) -> int:
        return max(0, self.tasks_submitted - (self.tasks_completed + self.tasks_failed))


class ThreadManager:
    """
    Fire-and-forget thread pool for I/O-bound background work (ffprobe runs).

    Features
    --------
    - submit(fn, *args, **kwargs) -> Future, never blocks the caller
    - join(timeout) waits for everything currently in flight
    - Stats snapshot
    - Clean shutdown, context manager support

    Notes
    -----
    - Submission is unbounded on purpose: callers such as the streamer registry
      must return immediately after scheduling.
    - Exceptions escaping a task are logged and counted, never re-raised on the
      submitting thread.
    """

    def __init__(
        self,
        name: str = "worker",
        max_workers: Optional[int] = None,
        thread_name_prefix: Optional[str] = None,
    ) -> None:
        if max_workers is None:
            n = os.cpu_count() or 4
            max_workers = max(4, min(8, n * 2))  # I/O-friendly default

        self._name = name
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix or f"{name}",
        )
        self._stats = ThreadStats(start_ts=time.time())
        self._pending: Set[Future] = set()
        self._closed = False
        self._lock = threading.Lock()

    # -------------------------
    # Lifecycle
    # -------------------------
    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """Shut down the executor. Safe to call multiple times."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def __enter__(self) -> "ThreadManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True, cancel_futures=True)

    @property
    def closed(self) -> bool:
        return self._closed

    def stats(self) -> ThreadStats:
        """Return a *snapshot* of current stats."""
        with self._lock:
            return ThreadStats(
                start_ts=self._stats.start_ts,
                tasks_submitted=self._stats.tasks_submitted,
                tasks_completed=self._stats.tasks_completed,
                tasks_failed=self._stats.tasks_failed,
            )

    # -------------------------
    # Submission
    # -------------------------
    def submit(self, fn: Callable[..., R], /, *args, **kwargs) -> Future[R]:
        """
        Schedule a callable and return its Future immediately.
        Raises RuntimeError once the manager has been shut down.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError(f"{self._name}: submit() after shutdown")
            fut: Future[R] = self._executor.submit(fn, *args, **kwargs)
            self._stats.tasks_submitted += 1
            self._pending.add(fut)

        fut.add_done_callback(self._on_done)
        return fut

    def _on_done(self, f: Future) -> None:
        failed = False
        if not f.cancelled():
            exc = f.exception()
            if exc is not None:
                failed = True
                log.error("%s task failed: %s", self._name, exc, exc_info=exc)
        with self._lock:
            self._pending.discard(f)
            if failed or f.cancelled():
                self._stats.tasks_failed += 1
            else:
                self._stats.tasks_completed += 1

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every task submitted so far has finished.
        Tasks submitted while waiting are picked up too.
        Returns False if the timeout elapsed first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                pending = set(self._pending)
            if not pending:
                return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            _, not_done = wait(pending, timeout=remaining)
            if not_done and deadline is not None and time.monotonic() >= deadline:
                return False
