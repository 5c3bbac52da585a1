"""
Fan-out Aggregator.

Runs the same query against every datacenter of a set, concurrently, and
reports each datacenter's outcome on one EventStream:

    RecordBatch(dc, records) | Failure(dc, error)   once per datacenter
    Done                                            once, after the last outcome

Each datacenter gets its own worker thread, so a slow or failing datacenter
never delays the others. Completion is tracked by a CompletionJoin; the
aggregator itself keeps no state between runs.

Usage:
    aggregator = FanOutAggregator(call)           # call(dc, query) -> records
    stream = aggregator.run({"us-west-1", "us-east-1"}, MachineQuery())
    for event in stream:
        ...
"""

import contextvars
import queue
import threading
import time
import uuid
from collections.abc import Callable, Collection, Sequence
from typing import Any, Generic, TypeVar

import structlog

from sdc_cli.core.concurrency import CompletionJoin, create_pool
from sdc_cli.core.exceptions import DcError, DcInternalError, DcTimeout, InvalidQueryError
from sdc_cli.core.logging import get_logger, log_with_source
from sdc_cli.fanout.events import DONE, Event, Failure, Outcome, RecordBatch
from sdc_cli.fanout.stream import EventStream
from sdc_cli.schemas.query import Query

logger = get_logger(__name__)

RecordT = TypeVar("RecordT")
QueryT = TypeVar("QueryT", bound=Query)

DcCall = Callable[[str, QueryT], Sequence[RecordT]]


class FanOutAggregator(Generic[QueryT, RecordT]):
    """
    Concurrent per-datacenter query runner.

    Args:
        call: Per-DC client, ``call(dc, query) -> records``. Expected to raise
            DcError on failure; any other exception is converted to
            DcInternalError for that datacenter.
        max_workers: Cap on worker threads per run. None means one per datacenter.
        timeout: Optional deadline in seconds for the whole run. Datacenters
            still outstanding when it fires are reported as DcTimeout.
    """

    def __init__(
        self,
        call: DcCall,
        max_workers: int | None = None,
        timeout: float | None = None,
    ) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        self._call = call
        self.max_workers = max_workers
        self.timeout = timeout

    def run(self, dcs: Collection[str], query: QueryT) -> EventStream:
        """
        Start one unit of work per datacenter and return the event stream.

        Returns immediately; events arrive as datacenters finish. An empty
        ``dcs`` yields a stream holding only Done.

        Raises:
            InvalidQueryError: ``query`` is not a Query or a datacenter id is
                blank. Raised before any work starts.
        """
        targets = _validate(dcs, query)
        run_id = uuid.uuid4().hex[:12]

        with structlog.contextvars.bound_contextvars(run_id=run_id):
            log_with_source(
                logger, "fanout", "info", "Fan-out started",
                dcs=sorted(targets), query=type(query).__name__, timeout=self.timeout,
            )
            fanout = _FanOutRun(self._call, targets, query, run_id, self.timeout)
            fanout.start(self.max_workers)

        return fanout.stream


class _FanOutRun:
    """State of one in-flight run: the join, the sink and the optional deadline."""

    def __init__(
        self,
        call: DcCall,
        targets: frozenset[str],
        query: Query,
        run_id: str,
        timeout: float | None,
    ) -> None:
        self._call = call
        self._query = query
        self._timeout = timeout
        self._total = len(targets)
        self._deadline: threading.Timer | None = None
        if timeout is not None and targets:
            self._deadline = threading.Timer(timeout, contextvars.copy_context().run, args=(self._expire,))
            self._deadline.daemon = True

        sink: "queue.Queue[Event]" = queue.Queue()
        self.join = CompletionJoin(targets, sink, DONE, on_done=self._finished)
        self.stream = EventStream(sink, targets, run_id)

    def start(self, max_workers: int | None) -> None:
        targets = sorted(self.stream.dcs)
        if not targets:
            return
        pool = create_pool(len(targets), max_workers)
        try:
            for dc in targets:
                pool.submit(self._unit, dc)
        finally:
            pool.shutdown(wait=False)
        if self._deadline is not None:
            self._deadline.start()

    def _unit(self, dc: str) -> None:
        started = time.monotonic()
        log_with_source(logger, "fanout", "debug", "Unit started", dc=dc)
        try:
            records = self._call(dc, self._query)
            event: Outcome = RecordBatch(dc, tuple(records))
        except DcError as e:
            event = Failure(dc, e.retag(dc))
        except Exception as e:
            event = Failure(dc, DcInternalError(dc, f"unexpected {type(e).__name__}: {e}", cause=e))
        except BaseException as e:
            # Never leave the join waiting on this datacenter.
            self._report(dc, Failure(
                dc, DcInternalError(dc, f"unit aborted by {type(e).__name__}", cause=e),
            ), started)
            raise
        self._report(dc, event, started)

    def _report(self, dc: str, event: Outcome, started: float) -> None:
        duration_ms = round((time.monotonic() - started) * 1000)
        if not self.join.resolve(dc, event):
            log_with_source(
                logger, "fanout", "debug", "Late outcome discarded",
                dc=dc, duration_ms=duration_ms,
            )
        elif isinstance(event, RecordBatch):
            log_with_source(
                logger, "fanout", "info", "Datacenter succeeded",
                dc=dc, records=len(event.records), duration_ms=duration_ms,
            )
        else:
            log_with_source(
                logger, "fanout", "warning", "Datacenter failed",
                dc=dc, kind=event.error.kind, error=event.error.message, duration_ms=duration_ms,
            )

    def _expire(self) -> None:
        timeout = self._timeout
        expired = self.join.expire(
            lambda dc: Failure(dc, DcTimeout(dc, f"no answer within the {timeout}s fan-out deadline")),
        )
        if expired:
            log_with_source(
                logger, "fanout", "warning", "Fan-out deadline expired",
                expired=expired, timeout=timeout,
            )

    def _finished(self) -> None:
        # Runs once, under the join's lock.
        if self._deadline is not None:
            self._deadline.cancel()
        log_with_source(logger, "fanout", "info", "Fan-out finished", outcomes=self._total)


def _validate(dcs: Collection[str], query: Any) -> frozenset[str]:
    if not isinstance(query, Query):
        raise InvalidQueryError(f"expected a Query, got {type(query).__name__}")
    if isinstance(dcs, str):
        raise InvalidQueryError("datacenters must be a collection of ids, not a single string")
    ids = list(dcs)
    for dc in ids:
        if not isinstance(dc, str) or not dc.strip():
            raise InvalidQueryError(f"invalid datacenter id: {dc!r}")
    return frozenset(ids)
