"""
Fan-out Event Stream.

Consumer-facing side of one fan-out run. Events arrive incrementally as
datacenters finish; the stream ends with Done.

A stream has exactly one consumer. Pick one of:

    for event in stream: ...                 # blocking iteration, ends after Done
    stream.subscribe(handler).wait()         # handler called on a background thread
    collect(stream)                          # sdc_cli.fanout.consumer

Attaching a second consumer raises StreamAlreadyConsumedError.
"""

import queue
import threading
from collections.abc import Callable, Iterator

from sdc_cli.core.exceptions import StreamAlreadyConsumedError
from sdc_cli.core.logging import get_logger
from sdc_cli.fanout.events import Done, Event

logger = get_logger(__name__)


class EventStream:
    """Single-consumer stream of fan-out events backed by a thread-safe queue."""

    def __init__(self, sink: "queue.Queue[Event]", dcs: frozenset[str], run_id: str) -> None:
        self._sink = sink
        self._claim_lock = threading.Lock()
        self._claimed = False
        self.dcs = dcs
        self.run_id = run_id

    def _claim(self) -> None:
        with self._claim_lock:
            if self._claimed:
                raise StreamAlreadyConsumedError(
                    f"Event stream for run {self.run_id} already has a consumer"
                )
            self._claimed = True

    def __iter__(self) -> Iterator[Event]:
        self._claim()
        return self._drain()

    def _drain(self) -> Iterator[Event]:
        while True:
            event = self._sink.get()
            yield event
            if isinstance(event, Done):
                return

    def subscribe(self, handler: Callable[[Event], None]) -> "Subscription":
        """Deliver every event, Done included, to ``handler`` on a background thread."""
        self._claim()
        subscription = Subscription(self._drain(), handler, self.run_id)
        subscription.start()
        return subscription


class Subscription:
    """Background dispatch of a stream's events to one handler."""

    def __init__(self, events: Iterator[Event], handler: Callable[[Event], None], run_id: str) -> None:
        self._events = events
        self._handler = handler
        self._run_id = run_id
        self._thread = threading.Thread(
            target=self._dispatch, name=f"sdc-subscription-{run_id}", daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def _dispatch(self) -> None:
        for event in self._events:
            try:
                self._handler(event)
            except Exception:
                # Keep dispatching so the handler still sees Done.
                logger.exception(
                    "Event handler failed",
                    extra={"run_id": self._run_id, "event": type(event).__name__},
                )

    @property
    def done(self) -> bool:
        """True once Done has been dispatched."""
        return not self._thread.is_alive()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until Done has been dispatched. Returns False on timeout."""
        self._thread.join(timeout)
        return not self._thread.is_alive()
