"""
Machine Schemas.

Pydantic schema for one machine record as returned by a datacenter's
CloudAPI ListMachines endpoint. Unknown keys are kept as extra fields so
JSON output shows every field the datacenter sent.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Machine(BaseModel):
    """One machine, as seen by one datacenter.

    Machine ids are only unique within a datacenter; never compare machines
    from different datacenters by id alone.
    """

    id: str = Field(description="Machine UUID")
    name: str | None = Field(default=None, description="Machine alias")
    type: str | None = Field(default=None, description="smartmachine or virtualmachine")
    brand: str | None = Field(default=None, description="Zone brand (joyent, kvm, lx, ...)")
    state: str = Field(description="running, stopped, provisioning, ...")
    image: str | None = Field(default=None, description="Image UUID")
    package: str | None = Field(default=None, description="Package name")
    memory: int | None = Field(default=None, description="RAM in MiB")
    disk: int | None = Field(default=None, description="Disk in MiB")
    created: datetime | None = Field(default=None, description="Creation timestamp")
    updated: datetime | None = Field(default=None, description="Last update timestamp")
    compute_node: str | None = Field(default=None, description="Compute node UUID")
    primary_ip: str | None = Field(default=None, alias="primaryIp", description="Primary IP address")
    ips: list[str] = Field(default_factory=list, description="All IP addresses")
    tags: dict[str, Any] = Field(default_factory=dict, description="Machine tags")

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)


MACHINE_FIELDS = (
    "dc",
    "id",
    "name",
    "type",
    "state",
    "image",
    "package",
    "memory",
    "disk",
    "created",
    "updated",
    "compute_node",
    "primary_ip",
)
"""Fields a machine listing can display or sort by (dc is the record's tag)."""
