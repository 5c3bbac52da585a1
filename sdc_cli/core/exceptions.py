"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

Per-datacenter failures (DcError and subclasses) carry the datacenter they
came from as a first-class field. They are delivered as Failure events by the
fan-out aggregator and are never raised past it. AggregateMultiError is the
presentation-level composite of several of them.

Precondition failures (PreconditionError and subclasses) are raised
synchronously, before any concurrent work starts.
"""

from collections.abc import Sequence


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Per-datacenter errors
# =============================================================================


class DcError(ApplicationError):
    """A failure attributed to exactly one datacenter."""

    default_code = "DC_ERROR"

    def __init__(
        self,
        dc: str,
        message: str,
        cause: BaseException | None = None,
        code: str | None = None,
    ) -> None:
        self.dc = dc
        self.cause = cause
        super().__init__(message, code=code or self.default_code)

    @property
    def kind(self) -> str:
        """Error kind, e.g. 'DcTimeout'."""
        return type(self).__name__

    def retag(self, dc: str) -> "DcError":
        """Return this error attributed to ``dc`` (self when already tagged so)."""
        if dc == self.dc:
            return self
        return type(self)(dc, self.message, cause=self.cause or self, code=self.code)

    def __str__(self) -> str:
        return f"{self.dc}: {self.kind}: {self.message}"


class DcUnreachable(DcError):
    """The datacenter could not be reached (DNS, connect, reset)."""

    default_code = "DC_UNREACHABLE"


class DcTimeout(DcError):
    """The datacenter did not answer in time."""

    default_code = "DC_TIMEOUT"


class DcAuthFailure(DcError):
    """The datacenter rejected our credentials."""

    default_code = "DC_AUTH_FAILURE"


class DcMalformedResponse(DcError):
    """The datacenter answered with something that is not a machine list."""

    default_code = "DC_MALFORMED_RESPONSE"


class DcApiError(DcError):
    """The datacenter answered with an HTTP error status."""

    default_code = "DC_API_ERROR"

    def __init__(
        self,
        dc: str,
        message: str,
        cause: BaseException | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(dc, message, cause=cause, code=code)

    def retag(self, dc: str) -> "DcError":
        if dc == self.dc:
            return self
        return DcApiError(
            dc, self.message, cause=self.cause or self, code=self.code,
            status_code=self.status_code,
        )


class DcInternalError(DcError):
    """A unit of work failed with an unexpected exception."""

    default_code = "DC_INTERNAL_ERROR"


class AggregateMultiError(ApplicationError):
    """Two or more datacenters failed during one fan-out run."""

    def __init__(self, errors: Sequence[DcError]) -> None:
        if len(errors) < 2:
            raise ValueError("AggregateMultiError needs at least two errors")
        self.errors: tuple[DcError, ...] = tuple(errors)
        lines = [f"{len(self.errors)} datacenters failed:"]
        lines.extend(f"  {err}" for err in self.errors)
        super().__init__("\n".join(lines), code="DC_MULTI_ERROR")

    @property
    def dcs(self) -> list[str]:
        """Datacenters that failed, in report order."""
        return [err.dc for err in self.errors]


# =============================================================================
# Preconditions
# =============================================================================


class PreconditionError(ApplicationError):
    """Raised before any concurrent work starts."""


class InvalidQueryError(PreconditionError):
    """The query (or its target datacenters) is malformed."""

    def __init__(self, message: str = "Invalid query") -> None:
        super().__init__(message, code="VAL_INVALID_QUERY")


class EmptyDcSetError(PreconditionError):
    """No datacenters are configured, so nothing can be queried."""

    def __init__(self, message: str = "No datacenters configured") -> None:
        super().__init__(message, code="CFG_EMPTY_DC_SET")


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(ApplicationError):
    """Raised when profiles or the datacenter directory are inconsistent."""

    def __init__(self, message: str = "Configuration error", code: str = "CFG_INVALID") -> None:
        super().__init__(message, code=code)


class ProfileNotFoundError(ConfigurationError):
    """Raised when the requested profile does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown profile: {name}", code="CFG_PROFILE_NOT_FOUND")


class UnknownDatacenterError(ConfigurationError):
    """Raised when a profile names datacenters missing from the directory."""

    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        super().__init__(
            f"Unknown datacenter(s): {', '.join(self.names)}",
            code="CFG_UNKNOWN_DC",
        )


# =============================================================================
# Streams
# =============================================================================


class StreamAlreadyConsumedError(ApplicationError):
    """Raised when a second consumer attaches to a fan-out event stream."""

    def __init__(self, message: str = "Event stream already has a consumer") -> None:
        super().__init__(message, code="SYS_STREAM_CONSUMED")


# =============================================================================
# Output
# =============================================================================


class OutputFormatError(ApplicationError):
    """Raised when requested columns or sort fields are not valid."""

    def __init__(self, message: str = "Invalid output format") -> None:
        super().__init__(message, code="VAL_OUTPUT_FORMAT")
