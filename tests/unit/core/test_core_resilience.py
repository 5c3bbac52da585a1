"""
Unit tests for the retry policy.
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from sdc_cli.core.resilience import log_retry, request_retrying


def run_with_retries(retrying, fn):
    for attempt in retrying:
        with attempt:
            result = fn()
    return result


class TestRequestRetrying:

    def test_transport_errors_retried_until_success(self):
        fn = MagicMock(side_effect=[httpx.ConnectError("refused"), httpx.ReadError("reset"), "ok"])

        result = run_with_retries(request_retrying("us-west-1", attempts=3, wait_min=0, wait_max=0), fn)

        assert result == "ok"
        assert fn.call_count == 3

    def test_last_error_reraised(self):
        """Exhausted retries re-raise the transport error itself, not RetryError."""
        fn = MagicMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(httpx.ConnectError):
            run_with_retries(request_retrying("us-west-1", attempts=2, wait_min=0, wait_max=0), fn)

        assert fn.call_count == 2

    def test_other_errors_not_retried(self):
        fn = MagicMock(side_effect=ValueError("not transport"))

        with pytest.raises(ValueError):
            run_with_retries(request_retrying("us-west-1", attempts=3, wait_min=0, wait_max=0), fn)

        assert fn.call_count == 1

    def test_single_attempt(self):
        fn = MagicMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(httpx.ConnectError):
            run_with_retries(request_retrying("us-west-1", attempts=1), fn)

        assert fn.call_count == 1

    def test_retries_logged_with_dependency(self):
        """Each retry emits a warning naming the datacenter."""
        fn = MagicMock(side_effect=[httpx.ConnectError("refused"), "ok"])

        with patch("sdc_cli.core.resilience.logger") as mock_logger:
            run_with_retries(request_retrying("eu-ams-1", attempts=2, wait_min=0, wait_max=0), fn)

        mock_logger.warning.assert_called_once()
        extra = mock_logger.warning.call_args.kwargs["extra"]
        assert extra["dependency"] == "eu-ams-1"
        assert extra["attempt"] == 1
        assert extra["resilience_event"] == "retry_attempt"
        assert "refused" in extra["error"]


class TestLogRetry:

    def test_falls_back_to_function_name(self):
        state = MagicMock()
        state.fn.__name__ = "list_machines"
        state.attempt_number = 2
        state.outcome_timestamp = 11.5
        state.start_time = 10.0
        state.outcome.failed = True
        state.outcome.exception.return_value = RuntimeError("boom")

        with patch("sdc_cli.core.resilience.logger") as mock_logger:
            log_retry(state)

        extra = mock_logger.warning.call_args.kwargs["extra"]
        assert extra["dependency"] == "list_machines"
        assert extra["duration_ms"] == 1500
        assert extra["error"] == "boom"
