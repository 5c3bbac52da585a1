# Pydantic schemas package
from sdc_cli.schemas.datacenter import Datacenter, ProfileView
from sdc_cli.schemas.machine import MACHINE_FIELDS, Machine
from sdc_cli.schemas.query import MACHINE_FILTERS, MachineQuery, Query

__all__ = [
    "Datacenter",
    "MACHINE_FIELDS",
    "MACHINE_FILTERS",
    "Machine",
    "MachineQuery",
    "ProfileView",
    "Query",
]
