"""
SmartDataCenter facade.

Binds configuration (profiles, datacenter directory, timeouts) to the
per-DC CloudAPI client and the fan-out aggregator. CLI commands talk to
this class only.

Usage:
    sdc = SmartDataCenter(profile_name="prod")
    stream = sdc.list_machines(MachineQuery.from_args(["state=running"]))
    result = collect(stream)
"""

import os

import httpx
import structlog

from sdc_cli.cloudapi.client import make_machine_lister
from sdc_cli.core.config import AppConfig, Settings, get_app_config, get_settings
from sdc_cli.core.config_schema import ProfileSchema
from sdc_cli.core.exceptions import EmptyDcSetError, ProfileNotFoundError, UnknownDatacenterError
from sdc_cli.core.logging import get_logger
from sdc_cli.fanout.aggregator import FanOutAggregator
from sdc_cli.fanout.stream import EventStream
from sdc_cli.schemas.machine import Machine
from sdc_cli.schemas.query import MachineQuery

logger = get_logger(__name__)

PROFILE_ENV = "SDC_PROFILE"


class SmartDataCenter:
    """
    Entry point for multi-datacenter operations under one profile.

    Profile resolution order: ``profile_name``, then $SDC_PROFILE, then the
    default from profiles.yaml.
    """

    def __init__(
        self,
        profile_name: str | None = None,
        app_config: AppConfig | None = None,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = app_config or get_app_config()
        self.settings = settings or get_settings()
        self._transport = transport
        self.profile = self._resolve_profile(profile_name or os.environ.get(PROFILE_ENV))

    def _resolve_profile(self, name: str | None) -> ProfileSchema:
        name = name or self.config.profiles.default
        for profile in self.config.profiles.profiles:
            if profile.name == name:
                return profile
        raise ProfileNotFoundError(name)

    @property
    def profiles(self) -> list[ProfileSchema]:
        return list(self.config.profiles.profiles)

    @property
    def datacenters(self) -> dict[str, str]:
        """The full datacenter directory, name → CloudAPI URL."""
        return dict(self.config.datacenters.datacenters)

    def target_dcs(self) -> list[str]:
        """
        Datacenters the active profile queries.

        Raises:
            EmptyDcSetError: No datacenters are configured at all
            UnknownDatacenterError: The profile names datacenters missing
                from the directory
        """
        directory = self.datacenters
        if not directory:
            raise EmptyDcSetError("No datacenters configured in datacenters.yaml")
        if self.profile.dcs is None:
            return sorted(directory)
        unknown = [dc for dc in self.profile.dcs if dc not in directory]
        if unknown:
            raise UnknownDatacenterError(unknown)
        return list(dict.fromkeys(self.profile.dcs))

    def aggregator(self) -> FanOutAggregator[MachineQuery, Machine]:
        app = self.config.application
        call = make_machine_lister(
            self.datacenters,
            self.profile,
            timeout=app.timeouts.request,
            retries=app.retries.attempts,
            retry_wait=(app.retries.wait_min, app.retries.wait_max),
            api_version=app.api_version,
            token=self.settings.api_token,
            transport=self._transport,
        )
        return FanOutAggregator(
            call,
            max_workers=self.config.concurrency.thread_pool.max_workers,
            timeout=app.fanout.timeout,
        )

    def list_machines(self, query: MachineQuery) -> EventStream:
        """Start listing machines in every target datacenter. Returns immediately."""
        dcs = self.target_dcs()
        with structlog.contextvars.bound_contextvars(profile=self.profile.name):
            return self.aggregator().run(dcs, query)
