"""Bounded worker pool that hands back every task's outcome.

Tasks return their results instead of writing into shared state; ``drain()``
waits for everything submitted so far (including tasks submitted by running
tasks) and returns one :class:`TaskOutcome` per task.  A task that raises is
recorded as a failed outcome and never stops its siblings.

Usage::

    with TaskPool(max_workers=4) as pool:
        for shard in SHARDS:
            pool.submit(scrape_index_shard, client, shard, session, label=shard)
        outcomes = pool.drain()
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any

from .config import MAX_WORKERS

LOGGER = logging.getLogger(__name__)


@dataclass
class TaskOutcome:
    label: str
    result: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TaskPool:
    def __init__(self, max_workers: int = MAX_WORKERS, *, log_every: int = 0):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self.log_every = log_every
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="calaccess"
        )
        self._lock = threading.Lock()
        self._pending: dict[Future, str] = {}

    def submit(self, fn: Callable[..., Any], *args: Any, label: str | None = None) -> Future:
        """Queue ``fn(*args)``; it starts as soon as a worker is free."""
        if label is None:
            label = getattr(fn, "__name__", repr(fn))
        with self._lock:
            future = self._executor.submit(fn, *args)
            self._pending[future] = label
        return future

    def drain(self) -> list[TaskOutcome]:
        """Block until no work is left; outcomes come back in completion order."""
        outcomes: list[TaskOutcome] = []
        t_start = time.perf_counter()
        while True:
            with self._lock:
                futures = list(self._pending)
            if not futures:
                break
            done, _ = wait(futures, return_when=FIRST_COMPLETED)
            for future in done:
                with self._lock:
                    label = self._pending.pop(future)
                    remaining = len(self._pending)
                error = future.exception()
                if error is None:
                    outcomes.append(TaskOutcome(label, result=future.result()))
                else:
                    outcomes.append(TaskOutcome(label, error=error))

                completed = len(outcomes)
                if self.log_every and completed % self.log_every == 0:
                    LOGGER.info(
                        "  [%d/%d] %.0fs elapsed",
                        completed,
                        completed + remaining,
                        time.perf_counter() - t_start,
                    )
        return outcomes

    def close(self, *, cancel_pending: bool = False) -> None:
        self._executor.shutdown(wait=True, cancel_futures=cancel_pending)

    def __enter__(self) -> TaskPool:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close(cancel_pending=exc_type is not None)
        return None
