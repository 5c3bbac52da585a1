"""
CloudAPI Client.

Per-datacenter HTTP client. One instance talks to one datacenter; the
fan-out aggregator calls it once per datacenter per run, from a worker
thread, so it uses a synchronous httpx.Client that is opened and closed
inside each call.

Every failure leaves this module as a DcError tagged with the datacenter:

    httpx.TimeoutException        → DcTimeout
    other httpx.TransportError    → DcUnreachable
    401 / 403                     → DcAuthFailure
    other status >= 400           → DcApiError
    non-JSON / non-list / invalid → DcMalformedResponse

Transport failures are retried (see sdc_cli.core.resilience) before they
are mapped.
"""

from collections.abc import Callable, Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from sdc_cli.core.config_schema import ProfileSchema
from sdc_cli.core.exceptions import (
    DcApiError,
    DcAuthFailure,
    DcError,
    DcMalformedResponse,
    DcTimeout,
    DcUnreachable,
)
from sdc_cli.core.logging import get_logger, log_with_source
from sdc_cli.core.resilience import request_retrying
from sdc_cli.schemas.machine import Machine
from sdc_cli.schemas.query import MachineQuery

logger = get_logger(__name__)

DEFAULT_API_VERSION = "~7"


class CloudApiClient:
    """
    HTTP client for one datacenter's CloudAPI.

    Usage:
        client = CloudApiClient("us-west-1", "https://us-west-1.api.example.com", "jill")
        machines = client.list_machines(MachineQuery())
    """

    def __init__(
        self,
        dc: str,
        url: str,
        account: str,
        timeout: float = 30.0,
        retries: int = 1,
        retry_wait: tuple[float, float] = (0.5, 4.0),
        api_version: str = DEFAULT_API_VERSION,
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            dc: Datacenter id; every error raised is tagged with it
            url: CloudAPI base URL for this datacenter
            account: Account login, the first path segment of every request
            timeout: Per-request timeout in seconds
            retries: Total attempts for transport failures
            retry_wait: (min, max) exponential backoff bounds in seconds
            api_version: Value of the Accept-Version header
            token: Optional bearer token
            transport: httpx transport override (tests use httpx.MockTransport)
        """
        self.dc = dc
        self.base_url = url.rstrip("/")
        self.account = account
        self.timeout = timeout
        self.retries = retries
        self.retry_wait = retry_wait
        self.api_version = api_version
        self._token = token
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Version": self.api_version,
            "User-Agent": "sdc-cli",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        )

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Make one HTTP request, retrying transport failures.

        Returns:
            httpx.Response with a status below 400

        Raises:
            DcError: Tagged with this client's datacenter
        """
        log_with_source(logger, "cloudapi", "debug", "API request", dc=self.dc, method=method, path=path)

        try:
            with self._client() as client:
                for attempt in request_retrying(
                    self.dc, self.retries, wait_min=self.retry_wait[0], wait_max=self.retry_wait[1],
                ):
                    with attempt:
                        response = client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise DcTimeout(self.dc, f"request timed out after {self.timeout}s", cause=e) from e
        except httpx.TransportError as e:
            raise DcUnreachable(self.dc, f"cannot reach {self.base_url}: {e}", cause=e) from e

        log_with_source(
            logger, "cloudapi", "debug", "API response",
            dc=self.dc, method=method, path=path, status_code=response.status_code,
        )

        if response.status_code >= 400:
            raise self._status_error(response)
        return response

    def _status_error(self, response: httpx.Response) -> DcError:
        code, message = _error_body(response)
        text = f"HTTP {response.status_code}"
        if code:
            text += f" {code}"
        if message:
            text += f": {message}"
        cause = httpx.HTTPStatusError(text, request=response.request, response=response)
        if response.status_code in (401, 403):
            return DcAuthFailure(self.dc, text, cause=cause)
        return DcApiError(self.dc, text, cause=cause, status_code=response.status_code)

    def list_machines(self, query: MachineQuery) -> list[Machine]:
        """
        List this account's machines in this datacenter.

        Args:
            query: Filters passed through to ListMachines

        Returns:
            Every machine the datacenter returned (possibly none)

        Raises:
            DcError: Tagged with this client's datacenter
        """
        response = self.request("GET", f"/{self.account}/machines", params=query.to_params())

        try:
            payload = response.json()
        except ValueError as e:
            raise DcMalformedResponse(self.dc, "response body is not JSON", cause=e) from e

        if not isinstance(payload, list):
            raise DcMalformedResponse(
                self.dc, f"expected a JSON list of machines, got {type(payload).__name__}",
            )

        try:
            return [Machine.model_validate(item) for item in payload]
        except ValidationError as e:
            raise DcMalformedResponse(
                self.dc, f"invalid machine record: {e.error_count()} validation error(s)", cause=e,
            ) from e


def _error_body(response: httpx.Response) -> tuple[str | None, str | None]:
    """Extract CloudAPI's {"code": ..., "message": ...} error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None, response.text.strip() or None
    if isinstance(body, dict):
        return body.get("code"), body.get("message")
    return None, None


def make_machine_lister(
    directory: Mapping[str, str],
    profile: ProfileSchema,
    timeout: float,
    retries: int = 1,
    retry_wait: tuple[float, float] = (0.5, 4.0),
    api_version: str = DEFAULT_API_VERSION,
    token: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Callable[[str, MachineQuery], list[Machine]]:
    """Build the per-DC ``call(dc, query)`` the fan-out aggregator consumes.

    Each call builds its own CloudApiClient, so concurrent calls share nothing.
    """

    def call(dc: str, query: MachineQuery) -> list[Machine]:
        client = CloudApiClient(
            dc,
            directory[dc],
            profile.user,
            timeout=timeout,
            retries=retries,
            retry_wait=retry_wait,
            api_version=api_version,
            token=token,
            transport=transport,
        )
        return client.list_machines(query)

    return call
