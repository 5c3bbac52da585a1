"""
Fan-out Events.

The typed events a fan-out run emits, in this order:

    one RecordBatch or Failure per datacenter (any interleaving)
    exactly one Done, after the last outcome

Records are exposed to consumers only with their datacenter attached
(RecordBatch.dc, TaggedRecord.dc); machine ids are only unique within a
datacenter.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from sdc_cli.core.exceptions import DcError

RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class RecordBatch(Generic[RecordT]):
    """Successful outcome: the complete record list from one datacenter."""

    dc: str
    records: tuple[RecordT, ...]


@dataclass(frozen=True)
class Failure:
    """Failed outcome for one datacenter."""

    dc: str
    error: DcError

    def __post_init__(self) -> None:
        if self.error.dc != self.dc:
            raise ValueError(f"error tagged {self.error.dc!r} reported for {self.dc!r}")


@dataclass(frozen=True)
class Done:
    """Terminal event: every datacenter has reported and nothing follows."""


DONE = Done()

Event = Union[RecordBatch, Failure, Done]
Outcome = Union[RecordBatch, Failure]


@dataclass(frozen=True)
class TaggedRecord(Generic[RecordT]):
    """A record together with the datacenter it came from."""

    dc: str
    record: RecordT

    def as_dict(self, by_alias: bool = False) -> dict[str, Any]:
        """Flatten to a plain dict with a ``dc`` key, for rendering.

        ``by_alias`` keeps the wire names the datacenter sent (``primaryIp``);
        the default uses field names, which is what table columns refer to.
        """
        record = self.record
        if hasattr(record, "model_dump"):
            data = record.model_dump(mode="json", by_alias=by_alias)
        else:
            data = dict(record)
        # The tag wins over any "dc" key the record itself carries.
        data.pop("dc", None)
        return {"dc": self.dc, **data}
