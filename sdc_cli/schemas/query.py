"""
Query Schemas.

A Query is the logical request sent, unchanged, to every datacenter of a
fan-out run. Queries are immutable so every worker thread can read the same
instance without copying it.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sdc_cli.core.exceptions import InvalidQueryError

MACHINE_FILTERS = frozenset({
    "brand",
    "credentials",
    "docker",
    "image",
    "limit",
    "memory",
    "name",
    "offset",
    "state",
    "tombstone",
    "type",
})
"""ListMachines filters CloudAPI accepts. Tag filters use the form tag.<name>."""


class Query(BaseModel):
    """Base class for every query the fan-out aggregator accepts."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class MachineQuery(Query):
    """List machines, optionally narrowed by CloudAPI filters."""

    filters: dict[str, str] = Field(default_factory=dict)

    @field_validator("filters")
    @classmethod
    def _known_filters(cls, value: dict[str, str]) -> dict[str, str]:
        unknown = sorted(
            key for key in value
            if key not in MACHINE_FILTERS and not _is_tag_filter(key)
        )
        if unknown:
            raise ValueError(f"unknown filter(s): {', '.join(unknown)}")
        for key in ("limit", "offset", "memory"):
            if key in value and not value[key].isdigit():
                raise ValueError(f"filter {key!r} must be a non-negative integer")
        return value

    @classmethod
    def from_args(cls, args: Iterable[str]) -> "MachineQuery":
        """Build a query from ``key=value`` command-line arguments.

        Raises:
            InvalidQueryError: On a malformed argument or an unknown filter
        """
        filters: dict[str, str] = {}
        for arg in args:
            key, sep, value = arg.partition("=")
            if not sep or not key:
                raise InvalidQueryError(f"invalid filter {arg!r}, expected key=value")
            filters[key] = value
        try:
            return cls(filters=filters)
        except ValidationError as e:
            messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
            raise InvalidQueryError(f"invalid machine filters: {messages}") from e

    def to_params(self) -> dict[str, str]:
        """Query-string parameters for ListMachines."""
        return dict(self.filters)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.filters.items())))


def _is_tag_filter(key: str) -> bool:
    return key.startswith("tag.") and len(key) > len("tag.")
