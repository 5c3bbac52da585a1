"""
CLI Test Fixtures.

Commands run through Typer's CliRunner against the real SmartDataCenter,
with the in-memory config and an httpx.MockTransport standing in for every
datacenter's CloudAPI.
"""

import logging
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from sdc_cli.sdc import SmartDataCenter


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Generator[None, None, None]:
    """The app callback installs handlers on the runner's streams; drop them afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def cloudapi(machine_payload) -> dict[str, Any]:
    """
    Programmable CloudAPI backend.

    ``responses`` maps a datacenter to an httpx.Response or an exception;
    datacenters not listed answer with one running machine named after them.
    ``requests`` records every request received.
    """
    state: dict[str, Any] = {"responses": {}, "requests": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        dc = request.url.host.split(".")[0]
        outcome = state["responses"].get(dc)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is not None:
            return outcome
        return httpx.Response(200, json=[machine_payload(f"{dc}-vm")])

    state["transport"] = httpx.MockTransport(handler)
    return state


@pytest.fixture
def patched_sdc(
    monkeypatch: pytest.MonkeyPatch, app_config, settings, cloudapi,
) -> Callable[..., SmartDataCenter]:
    """Make CliState build SmartDataCenter from the test config and backend."""

    def factory(profile_name: str | None = None) -> SmartDataCenter:
        return SmartDataCenter(
            profile_name=profile_name,
            app_config=app_config,
            settings=settings,
            transport=cloudapi["transport"],
        )

    monkeypatch.setattr("sdc_cli.cli.context.SmartDataCenter", factory)
    return factory
