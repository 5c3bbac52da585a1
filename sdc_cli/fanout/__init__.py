"""
Multi-datacenter fan-out.

- aggregator: FanOutAggregator, one worker per datacenter, exactly-once Done
- events: RecordBatch / Failure / Done and TaggedRecord
- stream: single-consumer EventStream (iteration or subscription)
- consumer: collect() into an AggregateResult and the error policy
"""

from sdc_cli.fanout.aggregator import FanOutAggregator
from sdc_cli.fanout.consumer import AggregateResult, accumulate, collect
from sdc_cli.fanout.events import DONE, Done, Event, Failure, RecordBatch, TaggedRecord
from sdc_cli.fanout.stream import EventStream, Subscription

__all__ = [
    "AggregateResult",
    "DONE",
    "Done",
    "Event",
    "EventStream",
    "FanOutAggregator",
    "Failure",
    "RecordBatch",
    "Subscription",
    "TaggedRecord",
    "accumulate",
    "collect",
]
