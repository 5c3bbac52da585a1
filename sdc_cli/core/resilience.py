"""
Resilience Infrastructure.

Retry callback and the retry policy used by per-datacenter requests.
Retries belong to the per-DC client only. The fan-out aggregator never
retries; a DC whose retries are exhausted surfaces as one Failure event.

Usage:
    from sdc_cli.core.resilience import request_retrying

    for attempt in request_retrying("us-west-1", attempts=3):
        with attempt:
            response = client.get(path)
"""

from functools import partial
from typing import Any

import httpx
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from sdc_cli.core.logging import get_logger

logger = get_logger(__name__)

RETRYABLE_ERRORS = (httpx.TransportError,)
"""Transport failures worth another attempt: connect errors, resets, read timeouts."""


def log_retry(retry_state: Any, dependency: str | None = None) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Pass this as `before_sleep=log_retry` in any @retry decorator, or bind
    the dependency name with functools.partial when retrying a code block.

    Args:
        retry_state: tenacity.RetryCallState instance
        dependency: Name to log instead of the retried function's name
    """
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round(
            (retry_state.outcome_timestamp - retry_state.start_time) * 1000
        )

    error = None
    if retry_state.outcome and retry_state.outcome.failed:
        error = str(retry_state.outcome.exception())

    name = dependency or getattr(retry_state.fn, "__name__", "unknown")

    logger.warning(
        f"Retrying {name} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "dependency": name,
            "attempt": retry_state.attempt_number,
            "duration_ms": duration_ms,
            "error": error,
        },
    )


def request_retrying(
    dependency: str,
    attempts: int,
    wait_min: float = 0.5,
    wait_max: float = 4.0,
) -> Retrying:
    """Build the retry controller for one per-DC request.

    Args:
        dependency: Name used in retry logs (the datacenter)
        attempts: Total attempts, including the first
        wait_min: Lower bound of the exponential backoff, in seconds
        wait_max: Upper bound of the exponential backoff, in seconds

    Returns:
        tenacity.Retrying that re-raises the last error once exhausted
    """
    return Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=wait_min, max=wait_max),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=partial(log_retry, dependency=dependency),
        reraise=True,
    )
