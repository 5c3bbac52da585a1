"""Per-datacenter CloudAPI client."""

from sdc_cli.cloudapi.client import CloudApiClient, make_machine_lister

__all__ = ["CloudApiClient", "make_machine_lister"]
