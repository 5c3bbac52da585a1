"""
Unit Test Fixtures.

Fixtures for unit tests: an in-memory application config, machine payloads
as CloudAPI returns them, and scripted per-datacenter calls for the fan-out
aggregator.
"""

import threading
import time
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest

from sdc_cli.core.config import Settings
from sdc_cli.core.config_schema import (
    ApplicationSchema,
    ConcurrencySchema,
    DatacentersSchema,
    FanoutSchema,
    ProfilesSchema,
    RetriesSchema,
    ThreadPoolSchema,
    TimeoutsSchema,
)
from sdc_cli.schemas.machine import Machine
from sdc_cli.schemas.query import MachineQuery

DATACENTERS = {
    "eu-ams-1": "https://eu-ams-1.api.example.test",
    "us-east-1": "https://us-east-1.api.example.test",
    "us-west-1": "https://us-west-1.api.example.test",
}


def _machine_payload(machine_id: str, **overrides: Any) -> dict[str, Any]:
    payload = {
        "id": machine_id,
        "name": f"vm-{machine_id}",
        "type": "smartmachine",
        "brand": "joyent",
        "state": "running",
        "image": "image-1",
        "package": "g4-highcpu-1G",
        "memory": 1024,
        "disk": 25600,
        "created": "2024-03-01T10:00:00.000Z",
        "updated": "2024-03-02T10:00:00.000Z",
        "compute_node": "cn-1",
        "primaryIp": "10.0.0.1",
        "ips": ["10.0.0.1"],
        "tags": {},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def machine_payload() -> Callable[..., dict[str, Any]]:
    """Factory for one ListMachines record as CloudAPI sends it."""
    return _machine_payload


@pytest.fixture
def make_machine() -> Callable[..., Machine]:
    """Factory for a parsed Machine."""

    def factory(machine_id: str, **overrides: Any) -> Machine:
        return Machine.model_validate(_machine_payload(machine_id, **overrides))

    return factory


@pytest.fixture
def query() -> MachineQuery:
    return MachineQuery()


@pytest.fixture
def scripted_call() -> Callable[..., Callable[[str, Any], list[Any]]]:
    """
    Build a per-DC call from a script.

    Each script entry maps a datacenter to a list of records to return or an
    exception to raise. ``delays`` holds per-DC sleeps in seconds. The call
    records every datacenter it was invoked for in ``call.calls``.
    """

    def factory(
        script: dict[str, Any],
        delays: dict[str, float] | None = None,
    ) -> Callable[[str, Any], list[Any]]:
        lock = threading.Lock()
        calls: list[str] = []

        def call(dc: str, query: Any) -> list[Any]:
            with lock:
                calls.append(dc)
            if delays and dc in delays:
                time.sleep(delays[dc])
            outcome = script[dc]
            if isinstance(outcome, BaseException):
                raise outcome
            return list(outcome)

        call.calls = calls  # type: ignore[attr-defined]
        return call

    return factory


def _app_config(
    datacenters: dict[str, str] | None = None,
    fanout_timeout: float | None = None,
    max_workers: int | None = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        application=ApplicationSchema(
            name="sdc-cli",
            version="1.0.0",
            description="test",
            api_version="~7",
            timeouts=TimeoutsSchema(request=5),
            retries=RetriesSchema(attempts=1, wait_min=0, wait_max=0),
            fanout=FanoutSchema(timeout=fanout_timeout),
        ),
        concurrency=ConcurrencySchema(thread_pool=ThreadPoolSchema(max_workers=max_workers)),
        datacenters=DatacentersSchema(
            datacenters=DATACENTERS if datacenters is None else datacenters,
        ),
        profiles=ProfilesSchema(
            default="personal",
            profiles=[
                {"name": "personal", "user": "jill", "key_id": "aa:bb"},
                {"name": "west", "user": "jack", "key_id": "cc:dd", "dcs": ["us-west-1"]},
                {"name": "broken", "user": "jo", "key_id": "ee:ff", "dcs": ["us-west-1", "mars-1"]},
            ],
        ),
    )


@pytest.fixture
def app_config() -> SimpleNamespace:
    """In-memory stand-in for AppConfig with three datacenters and three profiles."""
    return _app_config()


@pytest.fixture
def make_app_config() -> Callable[..., SimpleNamespace]:
    """Factory for AppConfig stand-ins with a custom directory or fan-out limits."""
    return _app_config


@pytest.fixture
def settings() -> Settings:
    return Settings(api_token="secret-token")
