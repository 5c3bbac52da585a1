"""
Fan-out Result Consumer.

Drains an EventStream into an AggregateResult and decides, after Done,
which error (if any) the run surfaces:

    no failures                      → no error
    one failure, only DC queried     → that DcError
    one failure, others succeeded    → that DcError if single_failure_fatal, else none
    two or more failures             → AggregateMultiError of all of them

Partial success is not an error at the data level: records from the
datacenters that answered are always kept.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sdc_cli.core.exceptions import AggregateMultiError, ApplicationError, DcError
from sdc_cli.fanout.events import Done, Event, Failure, RecordBatch, TaggedRecord


@dataclass
class AggregateResult:
    """Everything one fan-out run produced, in arrival order."""

    dcs: frozenset[str]
    records: list[TaggedRecord] = field(default_factory=list)
    errors: list[DcError] = field(default_factory=list)
    succeeded: list[str] = field(default_factory=list)

    @property
    def failed(self) -> list[str]:
        return [err.dc for err in self.errors]

    @property
    def complete(self) -> bool:
        """Every datacenter queried reported exactly one outcome."""
        reported = self.succeeded + self.failed
        return len(reported) == len(set(reported)) and set(reported) == set(self.dcs)

    def error(self, single_failure_fatal: bool = True) -> ApplicationError | None:
        """The error this run surfaces under the collection policy, if any."""
        if not self.errors:
            return None
        if len(self.errors) == 1:
            if single_failure_fatal or len(self.dcs) == 1:
                return self.errors[0]
            return None
        return AggregateMultiError(self.errors)

    def raise_for_errors(self, single_failure_fatal: bool = True) -> None:
        err = self.error(single_failure_fatal)
        if err is not None:
            raise err

    def records_by_dc(self) -> dict[str, list[Any]]:
        """Records grouped by datacenter; comparable across runs regardless of arrival order."""
        grouped: dict[str, list[Any]] = {dc: [] for dc in self.succeeded}
        for tagged in self.records:
            grouped[tagged.dc].append(tagged.record)
        return grouped

    def failures_by_dc(self) -> dict[str, str]:
        """Error kind per failed datacenter."""
        return {err.dc: err.kind for err in self.errors}


def accumulate(result: AggregateResult, event: Event) -> bool:
    """Fold one event into ``result``. Returns True once Done is seen."""
    if isinstance(event, RecordBatch):
        result.succeeded.append(event.dc)
        result.records.extend(TaggedRecord(event.dc, record) for record in event.records)
    elif isinstance(event, Failure):
        result.errors.append(event.error)
    elif isinstance(event, Done):
        return True
    else:
        raise TypeError(f"unexpected fan-out event: {event!r}")
    return False


def collect(stream: Iterable[Event], dcs: Iterable[str] | None = None) -> AggregateResult:
    """
    Consume ``stream`` until Done and return the accumulated result.

    Args:
        stream: An EventStream (claims it) or any iterable of events
        dcs: Datacenters queried; defaults to ``stream.dcs``
    """
    if dcs is None:
        dcs = getattr(stream, "dcs", ())
    result = AggregateResult(dcs=frozenset(dcs))
    for event in stream:
        if accumulate(result, event):
            break
    return result
