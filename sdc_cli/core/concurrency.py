"""
Concurrency Infrastructure.

Thread pool and join primitives for fan-out work.

    TracedThreadPoolExecutor - ThreadPoolExecutor that carries contextvars
                               (structlog context such as run_id) into workers
    CompletionJoin           - Exactly-once completion barrier over a fixed
                               set of keys, writing into a shared sink

Pool sizing for one fan-out run is configured in config/settings/concurrency.yaml.

Usage:
    from sdc_cli.core.concurrency import CompletionJoin, create_pool

    sink = queue.Queue()
    join = CompletionJoin(["us-west-1", "us-east-1"], sink, done=DONE)
    pool = create_pool(len(join.pending))
    ...
    join.resolve("us-west-1", event)   # emits DONE after the last key
"""

import contextvars
import queue
import threading
from collections.abc import Callable, Hashable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from sdc_cli.core.logging import get_logger

logger = get_logger(__name__)


class TracedThreadPoolExecutor(ThreadPoolExecutor):
    """ThreadPoolExecutor that propagates contextvars to worker threads.

    Standard ThreadPoolExecutor does not carry structlog context into worker
    threads. This subclass copies the current context before dispatching, so
    fields bound by the caller (run_id, profile) appear in worker logs.
    """

    def submit(self, fn, /, *args, **kwargs):
        ctx = contextvars.copy_context()
        return super().submit(ctx.run, fn, *args, **kwargs)


def create_pool(units: int, max_workers: int | None = None) -> TracedThreadPoolExecutor:
    """Create a pool for ``units`` concurrent units of work.

    One worker per unit unless ``max_workers`` caps it
    (concurrency.yaml: thread_pool.max_workers).
    """
    workers = max(1, units)
    if max_workers is not None:
        workers = min(workers, max_workers)
    logger.debug("Thread pool created", extra={"max_workers": workers, "units": units})
    return TracedThreadPoolExecutor(max_workers=workers, thread_name_prefix="sdc-fanout")


class CompletionJoin:
    """Exactly-once completion barrier.

    Tracks the keys still outstanding. Each key is resolved at most once;
    resolving it writes its event to ``sink``. Resolving the last key also
    writes ``done``. Both writes happen under one lock, so ``done`` always
    follows every outcome in sink order and is written exactly once, whatever
    order the workers finish in.

    ``on_done`` runs once, right after ``done`` is written, under the lock.
    """

    def __init__(
        self,
        keys: Iterable[Hashable],
        sink: "queue.Queue[Any]",
        done: Any,
        on_done: Callable[[], None] | None = None,
    ) -> None:
        self._pending = set(keys)
        self._total = len(self._pending)
        self._sink = sink
        self._done = done
        self._on_done = on_done
        self._lock = threading.Lock()
        self._finished = False
        if not self._pending:
            self._finish()

    @property
    def total(self) -> int:
        return self._total

    @property
    def pending(self) -> frozenset:
        with self._lock:
            return frozenset(self._pending)

    @property
    def finished(self) -> bool:
        with self._lock:
            return self._finished

    def resolve(self, key: Hashable, event: Any) -> bool:
        """Record the outcome for ``key``.

        Returns False (and writes nothing) when ``key`` was already resolved
        or never belonged to this join.
        """
        with self._lock:
            if key not in self._pending:
                return False
            self._pending.remove(key)
            self._sink.put(event)
            if not self._pending:
                self._finish()
            return True

    def expire(self, make_event: Callable[[Hashable], Any]) -> list[Hashable]:
        """Resolve every outstanding key with ``make_event(key)``.

        Returns the keys that were expired, in sorted order when sortable.
        """
        with self._lock:
            try:
                expired = sorted(self._pending)
            except TypeError:
                expired = list(self._pending)
            for key in expired:
                self._pending.remove(key)
                self._sink.put(make_event(key))
            if expired:
                self._finish()
            return expired

    def _finish(self) -> None:
        # Caller holds the lock (or is the constructor).
        if self._finished:
            return
        self._finished = True
        self._sink.put(self._done)
        if self._on_done is not None:
            self._on_done()
